"""Boot-time validation of authentication settings."""

from __future__ import annotations

from datetime import timedelta

import pytest
from pointatlas.core.config import (
    ConfigurationError,
    apply_auth_settings,
    env_bool,
    env_int,
    validate_auth_settings,
)


def _settings(**overrides):
    base = {
        "JWT_SECRET_KEY": "k" * 32,
        "JWT_ISSUER": "PointAtlas",
        "JWT_AUDIENCE": "PointAtlasClient",
        "ACCESS_TOKEN_EXPIRES_MINUTES": 60,
        "REFRESH_TOKEN_EXPIRES_MINUTES": 10080,
        "REFRESH_LEDGER_BACKEND": "sql",
    }
    base.update(overrides)
    return base


def test_valid_settings_have_no_problems():
    assert validate_auth_settings(_settings()) == []


@pytest.mark.parametrize(
    ("overrides", "fragment"),
    [
        ({"JWT_SECRET_KEY": "short"}, "at least 32 characters"),
        ({"JWT_ISSUER": " "}, "JWT_ISSUER is required"),
        ({"JWT_AUDIENCE": ""}, "JWT_AUDIENCE is required"),
        ({"ACCESS_TOKEN_EXPIRES_MINUTES": 0}, "ACCESS_TOKEN_EXPIRES_MINUTES must be between"),
        ({"REFRESH_TOKEN_EXPIRES_MINUTES": 43201}, "REFRESH_TOKEN_EXPIRES_MINUTES must be"),
        ({"ACCESS_TOKEN_EXPIRES_MINUTES": "60"}, "must be an integer"),
        ({"REFRESH_LEDGER_BACKEND": "memcached"}, "must be 'sql' or 'redis'"),
        ({"REFRESH_LEDGER_BACKEND": "redis"}, "REDIS_URL is required"),
    ],
)
def test_each_problem_is_reported(overrides, fragment):
    problems = validate_auth_settings(_settings(**overrides))
    assert any(fragment in p for p in problems), problems


def test_apply_derives_jwt_settings():
    config = _settings(ACCESS_TOKEN_EXPIRES_MINUTES=15)
    apply_auth_settings(config)
    assert config["JWT_ACCESS_TOKEN_EXPIRES"] == timedelta(minutes=15)
    assert config["JWT_DECODE_AUDIENCE"] == "PointAtlasClient"
    assert config["JWT_DECODE_ISSUER"] == "PointAtlas"
    assert config["JWT_DECODE_LEEWAY"] == 0


def test_apply_refuses_to_boot_on_bad_settings():
    with pytest.raises(ConfigurationError, match="JWT_SECRET_KEY"):
        apply_auth_settings(_settings(JWT_SECRET_KEY=""))


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("PA_FLAG", "Yes")
    monkeypatch.setenv("PA_NUM", " 42 ")
    monkeypatch.setenv("PA_BAD", "forty")
    assert env_bool("PA_FLAG") is True
    assert env_bool("PA_MISSING", True) is True
    assert env_int("PA_NUM", 1) == 42
    with pytest.raises(ConfigurationError):
        env_int("PA_BAD", 1)
