"""Application configuration from environment variables."""

from functools import lru_cache
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment (and .env file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Fitness Tracker API"
    debug: bool = False
    environment: str = "development"

    # API
    api_v1_prefix: str = "/api/v1"

    # Database (PostgreSQL)
    database_host: str = "localhost"
    database_port: int = 5432
    database_user: str = "postgres"
    database_password: str = ""  # Set in .env - never commit
    database_name: str = "fitness"
    database_ssl_mode: str = "prefer"

    # Full async DSN override, e.g. sqlite+aiosqlite:///./dev.db for local runs
    database_dsn: str = ""

    # Pool (production tuning)
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # AI workout generation throttle (per user, sliding window)
    ai_generate_rate_limit: int = 5
    ai_generate_rate_window_ms: int = 60 * 1000

    # Retry for status writes after generation
    db_retry_attempts: int = 3
    db_retry_base_delay_ms: int = 100

    # CORS: comma-separated list of allowed origins in production
    cors_origins: str = ""

    def _build_db_url(self, scheme: str = "postgresql", ssl_query: str = "sslmode=require") -> str:
        user = quote_plus(self.database_user)
        password = quote_plus(self.database_password)
        return (
            f"{scheme}://{user}:{password}@{self.database_host}:{self.database_port}"
            f"/{self.database_name}?{ssl_query}"
        )

    @property
    def database_url(self) -> str:
        """Synchronous URL for Alembic and tooling."""
        if self.database_dsn:
            return self.database_dsn.replace("+asyncpg", "").replace("+aiosqlite", "")
        return self._build_db_url(scheme="postgresql", ssl_query=f"sslmode={self.database_ssl_mode}")

    @property
    def async_database_url(self) -> str:
        """Async URL for FastAPI (asyncpg driver)."""
        if self.database_dsn:
            return self.database_dsn
        ssl = "require" if self.database_ssl_mode in ("require", "verify-ca", "verify-full") else "prefer"
        return self._build_db_url(scheme="postgresql+asyncpg", ssl_query=f"ssl={ssl}")


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
