"""
Configuration module using pydantic-settings for environment variable validation.
"""
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application Settings
    app_name: str = Field(default="product-catalog", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    log_to_file: bool = Field(default=True, description="Write rotating log files")
    log_dir: str = Field(default="logs", description="Directory for log files")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one loguru knows."""
        level = v.upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log_level: {v}")
        return level

    # API Settings
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    api_workers: int = Field(default=1, description="Number of API workers")
    api_prefix: str = Field(default="/api/v1", description="Prefix for all API routes")

    # PostgreSQL Settings
    postgres_host: str = Field(default="localhost", description="PostgreSQL host")
    postgres_port: int = Field(default=5432, description="PostgreSQL port")
    postgres_db: str = Field(default="catalog", description="PostgreSQL database name")
    postgres_user: str = Field(default="postgres", description="PostgreSQL user")
    postgres_password: str = Field(default="postgres", description="PostgreSQL password")
    postgres_ssl: bool = Field(default=False, description="Require SSL for PostgreSQL connections")

    # Connection pool
    db_pool_size: int = Field(default=10, description="Connections kept in the pool")
    db_max_overflow: int = Field(default=0, description="Extra connections allowed above pool_size")
    db_pool_timeout: int = Field(default=10, description="Seconds to wait for a free connection")
    db_pool_recycle: int = Field(default=1800, description="Seconds before a pooled connection is replaced")
    db_connect_timeout: int = Field(default=10, description="Seconds to wait when opening a connection")
    db_create_tables: bool = Field(default=True, description="Create schema on startup")

    @field_validator("db_pool_size", "db_pool_timeout", "db_pool_recycle", "db_connect_timeout")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Pool sizes and timeouts must be bounded and positive."""
        if v <= 0:
            raise ValueError("value must be greater than 0")
        return v

    @field_validator("db_max_overflow")
    @classmethod
    def validate_overflow(cls, v: int) -> int:
        if v < 0:
            raise ValueError("db_max_overflow must not be negative")
        return v

    @property
    def database_url(self) -> str:
        """Construct PostgreSQL connection URL (sync)."""
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def async_database_url(self) -> str:
        """Construct async PostgreSQL connection URL (asyncpg)."""
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


# Global settings instance
settings = Settings()
