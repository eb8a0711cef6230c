import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_DEFAULT_DB_URL = "sqlite:///./nuance_qc.db"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseSettings):
    env: str = "dev"
    database_url: str = "sqlite+pysqlite:///./nuance_qc.db"

    history_window: int = Field(default=20, ge=1)

    generator_provider: str = "fake"
    generator_model: str = "fake-rewrite-v1"
    generator_base_url: str = "https://api.openai.com/v1"
    generator_api_key: str = ""
    generator_timeout_s: float = 45.0
    generator_connect_timeout_s: float = 5.0
    generator_temperature: float = 0.4
    generator_max_tokens: int | None = None

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


def _is_sqlite_memory_url(db_url: str) -> bool:
    candidate = (db_url or "").strip().lower()
    if not candidate.startswith("sqlite"):
        return False
    if ":memory:" in candidate:
        return True
    return candidate in {
        "sqlite://",
        "sqlite:///",
        "sqlite+pysqlite://",
        "sqlite+pysqlite:///",
    }


def validate_database_url(env: str, db_url: str | None) -> str:
    env_value = (env or "").strip().lower()
    if env_value != "dev":
        return db_url or ""

    if not db_url or not db_url.strip():
        return DEV_DEFAULT_DB_URL

    if _is_sqlite_memory_url(db_url):
        raise RuntimeError(
            "DATABASE_URL cannot be sqlite :memory: when ENV=dev because fingerprint history would not persist. "
            f"Set DATABASE_URL={DEV_DEFAULT_DB_URL} or another file-based sqlite url."
        )
    return db_url


def configure_logging(level: str | None = None) -> None:
    resolved = str(level or settings.log_level or "INFO").strip().upper()
    logging.basicConfig(level=getattr(logging, resolved, logging.INFO), format=_LOG_FORMAT)
    logging.getLogger("nuance_qc").setLevel(getattr(logging, resolved, logging.INFO))


settings = Settings()
settings.database_url = validate_database_url(settings.env, settings.database_url)
