import os
import subprocess
import sys
from pathlib import Path

from sqlalchemy.engine import make_url


def _env_default(name: str, value: str) -> None:
    current = os.environ.get(name)
    if current is None or current.strip() == "":
        os.environ[name] = value


def _prepare_environment() -> None:
    _env_default("APP_PORT", "8000")
    _env_default("DATABASE_URL", "sqlite+pysqlite:////data/classbook.db")
    _env_default("AUTO_CREATE_SCHEMA", "false")
    _env_default("LOG_LEVEL", "INFO")
    _env_default("SEED_DEMO_DATA", "false")


def _ensure_storage_paths() -> None:
    try:
        parsed_url = make_url(os.environ["DATABASE_URL"])
    except Exception:
        return

    if not parsed_url.drivername.startswith("sqlite"):
        return

    db_path = parsed_url.database
    if not db_path or db_path == ":memory:":
        return

    Path(db_path).parent.mkdir(parents=True, exist_ok=True)


def _flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes", "on"}


def _run(cmd: list[str]) -> None:
    print(">", " ".join(cmd), flush=True)
    subprocess.run(cmd, check=True)


def main() -> None:
    _prepare_environment()
    _ensure_storage_paths()

    print("Starting standalone Classbook backend with:", flush=True)
    print(f"  DATABASE_URL={os.environ['DATABASE_URL']}", flush=True)
    print(f"  LOG_LEVEL={os.environ['LOG_LEVEL']}", flush=True)

    _run([sys.executable, "-m", "alembic", "upgrade", "head"])
    if _flag("SEED_DEMO_DATA"):
        _run([sys.executable, "scripts/seed_demo_data.py"])

    os.execvp(
        "uvicorn",
        [
            "uvicorn",
            "classbook.main:app",
            "--host",
            "0.0.0.0",
            "--port",
            os.environ["APP_PORT"],
        ],
    )


if __name__ == "__main__":
    main()
