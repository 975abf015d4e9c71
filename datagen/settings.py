"""Runtime settings using Pydantic Settings."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Generator settings loaded from environment variables."""

    # Full SQLAlchemy URL, takes precedence over the PG_* parts
    database_url: Optional[str] = None

    # PostgreSQL
    pg_host: str = "localhost"
    pg_port: int = 5432
    pg_user: str = "postgres"
    pg_password: str = "postgres"
    pg_database: str = "benchmark"

    # Engine pool
    pool_size: int = 4
    pool_max_overflow: int = 4
    pool_timeout: float = 16.0

    # Generation
    batch_size: int = 10_000
    log_level: str = "INFO"

    @property
    def dsn(self) -> str:
        """Get the SQLAlchemy connection string."""
        if self.database_url:
            return self.database_url
        return f"postgresql+psycopg2://{self.pg_user}:{self.pg_password}@{self.pg_host}:{self.pg_port}/{self.pg_database}"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra environment variables


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
