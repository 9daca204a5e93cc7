"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping, MutableMapping
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

MIN_SECRET_LENGTH: Final[int] = 32
ACCESS_MINUTES_RANGE: Final[tuple[int, int]] = (1, 1440)
REFRESH_MINUTES_RANGE: Final[tuple[int, int]] = (1, 43200)

# Loads .env during development (no-op when the file is missing)
load_dotenv()


class ConfigurationError(RuntimeError):
    """Raised at boot when mandatory settings are missing or out of range."""


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: int
        Value returned when the variable is unset or blank.

    Returns
    -------
    int
        Parsed value.

    Raises
    ------
    ConfigurationError
        If the variable is set but is not an integer.
    """
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    JWT_SECRET_KEY: str
        HMAC key used to sign access tokens. Must hold at least 32 characters.
    JWT_ISSUER: str
        ``iss`` claim written into and required from every access token.
    JWT_AUDIENCE: str
        ``aud`` claim written into and required from every access token.
    ACCESS_TOKEN_EXPIRES_MINUTES: int
        Access token lifetime, 1 to 1440 minutes.
    REFRESH_TOKEN_EXPIRES_MINUTES: int
        Refresh token lifetime, 1 to 43200 minutes.
    REFRESH_LEDGER_BACKEND: str
        ``"sql"`` (default) or ``"redis"``; the latter requires ``REDIS_URL``.
    MARKERS_DEFAULT_PAGE_SIZE: int
        Page size used when the client omits ``pageSize``.
    MARKERS_MAX_PAGE_SIZE: int
        Upper bound applied to every marker page.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes. Authentication values are checked by
    :func:`apply_auth_settings` when the application is built.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "PointAtlas")
    JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "PointAtlasClient")
    ACCESS_TOKEN_EXPIRES_MINUTES = env_int("ACCESS_TOKEN_EXPIRES_MINUTES", 60)
    REFRESH_TOKEN_EXPIRES_MINUTES = env_int("REFRESH_TOKEN_EXPIRES_MINUTES", 10080)

    # Refresh token ledger
    REFRESH_LEDGER_BACKEND = os.getenv("REFRESH_LEDGER_BACKEND", "sql").strip().lower()
    REDIS_URL = os.getenv("REDIS_URL")

    # Markers
    MARKERS_DEFAULT_PAGE_SIZE = env_int("MARKERS_DEFAULT_PAGE_SIZE", 100)
    MARKERS_MAX_PAGE_SIZE = env_int("MARKERS_MAX_PAGE_SIZE", 500)

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Rate limiting (Flask-Limiter)
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_HEADERS_ENABLED = True
    AUTH_LOGIN_RATE_LIMIT = os.getenv("AUTH_LOGIN_RATE_LIMIT", "10 per minute")

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and ships a placeholder signing key so the
    server boots without a ``.env`` file. Never reuse it outside a laptop.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    JWT_SECRET_KEY = os.getenv(
        "JWT_SECRET_KEY", "dev-only-signing-key-change-me-0123456789abcdef"
    )
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables rate limiting.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Propagates exceptions so pytest can surface tracebacks directly.
    """

    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = "testing-signing-key-0123456789abcdef0123"
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    RATELIMIT_ENABLED = False
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled. There is no default signing key:
    ``JWT_SECRET_KEY`` must come from the environment or boot fails.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def _require_int_in_range(config: Mapping[str, Any], key: str, bounds: tuple[int, int]) -> int:
    raw = config.get(key)
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ConfigurationError(f"{key} must be an integer")
    low, high = bounds
    if not low <= raw <= high:
        raise ConfigurationError(f"{key} must be between {low} and {high}, got {raw}")
    return raw


def validate_auth_settings(config: Mapping[str, Any]) -> list[str]:
    """Collect every problem with the authentication settings.

    :param config: Flask config (or any mapping with the same keys).
    :returns: Human-readable problems; empty when the settings are usable.
    :rtype: list[str]
    """
    problems: list[str] = []
    secret = config.get("JWT_SECRET_KEY") or ""
    if len(str(secret)) < MIN_SECRET_LENGTH:
        problems.append(f"JWT_SECRET_KEY must be at least {MIN_SECRET_LENGTH} characters long")
    for key in ("JWT_ISSUER", "JWT_AUDIENCE"):
        if not str(config.get(key) or "").strip():
            problems.append(f"{key} is required")
    for key, bounds in (
        ("ACCESS_TOKEN_EXPIRES_MINUTES", ACCESS_MINUTES_RANGE),
        ("REFRESH_TOKEN_EXPIRES_MINUTES", REFRESH_MINUTES_RANGE),
    ):
        try:
            _require_int_in_range(config, key, bounds)
        except ConfigurationError as exc:
            problems.append(str(exc))
    backend = str(config.get("REFRESH_LEDGER_BACKEND") or "sql").lower()
    if backend not in {"sql", "redis"}:
        problems.append("REFRESH_LEDGER_BACKEND must be 'sql' or 'redis'")
    elif backend == "redis" and not config.get("REDIS_URL"):
        problems.append("REDIS_URL is required when REFRESH_LEDGER_BACKEND is 'redis'")
    return problems


def apply_auth_settings(config: MutableMapping[str, Any]) -> None:
    """Validate authentication settings and derive Flask-JWT-Extended keys.

    :param config: Mutable Flask config, updated in place.
    :raises ConfigurationError: If any setting is missing or out of range.
    """
    problems = validate_auth_settings(config)
    if problems:
        raise ConfigurationError("Invalid authentication settings: " + "; ".join(problems))

    config["JWT_ALGORITHM"] = "HS256"
    config["JWT_TOKEN_LOCATION"] = ["headers"]
    config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(
        minutes=int(config["ACCESS_TOKEN_EXPIRES_MINUTES"])
    )
    config["JWT_ENCODE_ISSUER"] = config["JWT_ISSUER"]
    config["JWT_DECODE_ISSUER"] = config["JWT_ISSUER"]
    config["JWT_ENCODE_AUDIENCE"] = config["JWT_AUDIENCE"]
    config["JWT_DECODE_AUDIENCE"] = config["JWT_AUDIENCE"]
    config["JWT_DECODE_LEEWAY"] = 0
