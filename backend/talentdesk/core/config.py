"""Settings for the TalentDesk client core, read from the environment and ``.env``."""

from pathlib import Path
from urllib.parse import quote_plus, urlsplit, urlunsplit

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ASYNC_POSTGRES_SCHEME = "postgresql+asyncpg"
PASSTHROUGH_SCHEMES = frozenset({"sqlite+aiosqlite"})


def _is_postgres_scheme(scheme: str) -> bool:
    return scheme in {"postgres", "postgresql"} or scheme.startswith("postgresql+")


def to_async_database_url(raw_url: str) -> str:
    """Rewrite a PostgreSQL URL to the asyncpg driver scheme.

    ``sqlite+aiosqlite`` URLs are returned as given.

    Raises:
        ValueError: If the URL is neither PostgreSQL nor a passthrough scheme.
    """
    parts = urlsplit(raw_url)
    scheme = parts.scheme.lower()
    if scheme in PASSTHROUGH_SCHEMES:
        return raw_url
    if not _is_postgres_scheme(scheme):
        raise ValueError(
            "DATABASE_URL must use postgres/postgresql scheme for async SQLAlchemy"
        )
    return urlunsplit(parts._replace(scheme=ASYNC_POSTGRES_SCHEME))


class Settings(BaseSettings):
    """Typed settings for the TalentDesk client core."""

    PROJECT_NAME: str = "TalentDesk"
    VERSION: str = "0.1.0"
    ENVIRONMENT: str = Field(default="local", alias="ENV")
    DEBUG: bool = False

    # Database
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "postgres"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_PASSWORD_FILE: str = ""
    DATABASE_URL_OVERRIDE: str = Field(default="", alias="DATABASE_URL")
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_RECYCLE: int = 3600
    DB_POOL_TIMEOUT: int = 30
    DB_CONNECT_RETRIES: int = 3
    DB_CONNECT_RETRY_DELAY: float = 1.0

    # Auth service
    AUTH_URL: str = "http://localhost:54321"
    AUTH_ANON_KEY: str = ""
    AUTH_TIMEOUT_SECONDS: float = 10.0
    SIGN_IN_PATH: str = "/auth"

    # Query cache
    QUERY_STALE_TIME_SECONDS: float = 300.0
    QUERY_GC_TIME_SECONDS: float = 300.0
    QUERY_RETRY_BASE_DELAY_SECONDS: float = 1.0
    QUERY_RETRY_MAX_DELAY_SECONDS: float = 30.0
    QUERY_NETWORK_RETRIES: int = 2
    QUERY_SERVER_RETRIES: int = 1

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    @field_validator("AUTH_URL", mode="before")
    @classmethod
    def strip_auth_url(cls, value: str | None) -> str:
        """Trim whitespace and the trailing slash from the auth base URL.

        Raises:
            ValueError: If nothing is left.
        """
        url = str(value or "").strip().rstrip("/")
        if not url:
            raise ValueError("AUTH_URL must be a non-empty URL")
        return url

    @field_validator("QUERY_NETWORK_RETRIES", "QUERY_SERVER_RETRIES")
    @classmethod
    def non_negative_retries(cls, value: int) -> int:
        if value < 0:
            raise ValueError("retry budgets cannot be negative")
        return value

    @property
    def resolved_db_password(self) -> str:
        """Password from ``DB_PASSWORD_FILE`` when readable, else ``DB_PASSWORD``."""
        secret_path = Path(self.DB_PASSWORD_FILE) if self.DB_PASSWORD_FILE else None
        if secret_path is None:
            return self.DB_PASSWORD
        try:
            if secret_path.is_file():
                return secret_path.read_text(encoding="utf-8").rstrip()
        except OSError:
            pass
        return self.DB_PASSWORD

    @property
    def DATABASE_URL(self) -> str:
        """Async SQLAlchemy URL: the ``DATABASE_URL`` override or one built from ``DB_*``.

        Raises:
            ValueError: If the override uses an unsupported scheme.
        """
        override = self.DATABASE_URL_OVERRIDE.strip()
        if override:
            return to_async_database_url(override)
        credentials = f"{quote_plus(self.DB_USER)}:{quote_plus(self.resolved_db_password)}"
        return (
            f"{ASYNC_POSTGRES_SCHEME}://{credentials}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )


settings = Settings()
