from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from classbook.core.config import get_settings

# Seconds a SQLite writer waits on a locked database before failing.
SQLITE_BUSY_TIMEOUT = 30

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def engine_options(database_url: str) -> dict[str, Any]:
    """Keyword arguments for ``create_engine``.

    Sheet loads run on worker threads, so SQLite connections must be usable
    across threads; an in-memory database is pinned to one shared connection.
    """
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return {"pool_pre_ping": True}

    options: dict[str, Any] = {
        "connect_args": {"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT},
    }
    if url.database in (None, "", ":memory:"):
        options["poolclass"] = StaticPool
    return options


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        database_url = get_settings().database_url
        _engine = create_engine(database_url, **engine_options(database_url))
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False)
    return _session_factory


def reset_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None
