"""
Note Service: Application Configuration
=========================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe loading with validation on startup, so a bad pool size or
       port fails before the first request instead of during it.
How:   Values are read, highest priority first, from constructor kwargs,
       environment variables, a `.env` file, and `postgres_config.json` in
       the working directory. A singleton `settings` object is exported.
Who:   Imported by main.py (server, logging) and the SQL note store (engine).

Example postgres_config.json:
    {
        "db_host": "localhost",
        "db_port": 5432,
        "db_user": "notes",
        "db_password": "secret",
        "db_name": "notes",
        "db_max_open_conns": 10,
        "db_max_idle_conns": 5
    }
"""

from typing import Optional, Tuple, Type, Union

from pydantic import Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """
    Application settings.

    Defaults target a local PostgreSQL; production deployments override the
    database credentials through the environment or the JSON file.
    """

    # ── Database ──────────────────────────────────────────────────────────
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=5432, ge=1, le=65535)
    db_user: str = Field(default="postgres")
    db_password: str = Field(default="")
    db_name: str = Field(default="notes")

    # Upper bound on simultaneously open connections
    db_max_open_conns: int = Field(default=10, ge=1, le=100)

    # Connections kept open while idle; the remainder up to max_open is
    # opened on demand and closed when returned
    db_max_idle_conns: int = Field(default=5, ge=1, le=100)

    # Full SQLAlchemy URL; when set, the db_* connection parts are ignored
    database_url: Optional[str] = Field(default=None)

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8080, ge=1, le=65535)

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @model_validator(mode="after")
    def validate_pool_bounds(self) -> "Settings":
        if self.db_max_idle_conns > self.db_max_open_conns:
            raise ValueError(
                f"db_max_idle_conns ({self.db_max_idle_conns}) must not exceed "
                f"db_max_open_conns ({self.db_max_open_conns})"
            )
        return self

    @property
    def database_dsn(self) -> Union[str, URL]:
        """
        What: The URL handed to create_async_engine.
        Why URL.create: Quotes special characters in the password, which a
              formatted string would pass through verbatim.
        """
        if self.database_url:
            return self.database_url
        return URL.create(
            drivername="postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )

    @property
    def db_pool_size(self) -> int:
        return self.db_max_idle_conns

    @property
    def db_max_overflow(self) -> int:
        return self.db_max_open_conns - self.db_max_idle_conns

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        json_file="postgres_config.json",
        json_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # The JSON file sits below the environment so a deployment can
        # override a single value without editing the file
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            JsonConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


# Singleton instance, imported throughout the application
settings = Settings()
