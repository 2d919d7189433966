import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from flowtokens.core.config import Settings, get_settings


def test_settings_defaults():
    """Test that settings load with correct defaults."""
    get_settings.cache_clear()

    settings = Settings(_env_file=None)

    assert settings.app_name == "Flow Tokens"
    assert settings.environment == "development"
    assert settings.api_prefix == "/api/v1"
    assert settings.is_development is True
    assert settings.is_production is False
    assert settings.token_bytes == 9
    assert settings.token_max_attempts == 10
    assert settings.token_widen_after == 5
    assert settings.tracked_post_types == ["job_sheet", "act"]


def test_settings_env_override():
    """Test that environment variables override defaults."""
    with patch.dict(os.environ, {
        "FLOWTOKENS_ENVIRONMENT": "production",
        "FLOWTOKENS_PORT": "9000",
        "FLOWTOKENS_TOKEN_BYTES": "12",
    }):
        settings = Settings(_env_file=None)

        assert settings.environment == "production"
        assert settings.is_production is True
        assert settings.port == 9000
        assert settings.token_bytes == 12


def test_tracked_post_types_from_comma_separated_env():
    with patch.dict(os.environ, {"FLOWTOKENS_TRACKED_POST_TYPES": "act, job_sheet ,invoice,"}):
        settings = Settings(_env_file=None)

    assert settings.tracked_post_types == ["act", "job_sheet", "invoice"]


def test_tracked_post_types_from_list():
    settings = Settings(_env_file=None, tracked_post_types=["act"])
    assert settings.tracked_post_types == ["act"]


@pytest.mark.parametrize("field,value", [
    ("token_bytes", 2),
    ("token_max_attempts", 0),
    ("token_widen_after", 0),
])
def test_token_settings_bounds(field, value):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: value})


def test_sqlite_rejects_multiple_workers():
    with pytest.raises(ValidationError, match="SQLite does not support multiple worker"):
        Settings(_env_file=None, database_url="sqlite+aiosqlite:///./x.db", workers=2)


def test_postgres_allows_multiple_workers():
    settings = Settings(
        _env_file=None,
        database_url="postgresql+asyncpg://user:pw@localhost/flowtokens",
        workers=4,
    )
    assert settings.workers == 4


def test_get_settings_is_cached():
    get_settings.cache_clear()
    assert get_settings() is get_settings()
    get_settings.cache_clear()
