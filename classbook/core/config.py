from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Classbook Admin API"
    app_env: str = "dev"
    app_version: str = "0.1.0"
    api_v1_prefix: str = ""

    log_level: str = "INFO"

    database_url: str = "sqlite+pysqlite:///./classbook.db"
    auto_create_schema: bool = True

    loader_max_workers: int = 6
    student_import_max_bytes: int = 5 * 1024 * 1024


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def clear_settings_cache() -> None:
    get_settings.cache_clear()
