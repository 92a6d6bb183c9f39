"""
Note Service: Settings Tests
==============================

What:  Tests for configuration loading, validation and derived values.
How:   Builds Settings instances directly; the JSON-file tests run in a
       temporary working directory.
"""

import json

import pytest
from pydantic import ValidationError

from noteservice.config import Settings

DB_ENV_VARS = (
    "DB_HOST", "DB_PORT", "DB_USER", "DB_PASSWORD", "DB_NAME",
    "DB_MAX_OPEN_CONNS", "DB_MAX_IDLE_CONNS", "DATABASE_URL",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Empty working directory and no database variables in the environment."""
    for name in DB_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestDatabaseDsn:

    def test_built_from_parts(self, clean_env):
        settings = Settings(
            db_host="db.internal",
            db_port=6543,
            db_user="notes",
            db_password="p@ss:word",
            db_name="notes_prod",
        )

        dsn = settings.database_dsn

        assert dsn.drivername == "postgresql+asyncpg"
        assert dsn.host == "db.internal"
        assert dsn.port == 6543
        assert dsn.username == "notes"
        assert dsn.password == "p@ss:word"
        assert dsn.database == "notes_prod"

    def test_empty_password_is_omitted(self, clean_env):
        assert Settings(db_password="").database_dsn.password is None

    def test_database_url_overrides_parts(self, clean_env):
        settings = Settings(db_host="ignored", database_url="sqlite+aiosqlite:///notes.db")

        assert settings.database_dsn == "sqlite+aiosqlite:///notes.db"


class TestPoolBounds:

    def test_pool_mapping(self, clean_env):
        settings = Settings(db_max_open_conns=10, db_max_idle_conns=4)

        assert settings.db_pool_size == 4
        assert settings.db_max_overflow == 6

    def test_idle_equal_to_open(self, clean_env):
        assert Settings(db_max_open_conns=3, db_max_idle_conns=3).db_max_overflow == 0

    def test_idle_above_open_rejected(self, clean_env):
        with pytest.raises(ValidationError, match="must not exceed"):
            Settings(db_max_open_conns=2, db_max_idle_conns=5)

    def test_zero_open_rejected(self, clean_env):
        with pytest.raises(ValidationError):
            Settings(db_max_open_conns=0)


class TestLogLevel:

    def test_normalized_to_upper_case(self, clean_env):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_rejected(self, clean_env):
        with pytest.raises(ValidationError, match="Invalid log_level"):
            Settings(log_level="chatty")


class TestJsonConfigFile:

    def test_values_read_from_json_file(self, clean_env):
        (clean_env / "postgres_config.json").write_text(
            json.dumps({"db_host": "from-file", "db_port": 5433, "db_max_idle_conns": 2})
        )

        settings = Settings()

        assert settings.db_host == "from-file"
        assert settings.db_port == 5433
        assert settings.db_pool_size == 2

    def test_environment_beats_json_file(self, clean_env, monkeypatch):
        (clean_env / "postgres_config.json").write_text(json.dumps({"db_port": 5433}))
        monkeypatch.setenv("DB_PORT", "6543")

        assert Settings().db_port == 6543

    def test_missing_file_uses_defaults(self, clean_env):
        settings = Settings()

        assert settings.db_host == "localhost"
        assert settings.db_port == 5432
