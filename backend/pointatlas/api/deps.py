"""Shared API helpers: principal resolution, service wiring and responses."""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable
from datetime import timedelta
from typing import Any, TypeVar, cast

from flask import Flask, Response, current_app, jsonify, request

from pointatlas.core.errors import Unauthorized, api_error_for
from pointatlas.core.extensions import get_redis
from pointatlas.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from pointatlas.infra.redis.redis_refresh_token_ledger import RedisRefreshTokenLedger
from pointatlas.infra.sql.sql_credential_store import SqlCredentialStore
from pointatlas.infra.sql.sql_refresh_token_ledger import SqlRefreshTokenLedger
from pointatlas.services._shared.ports import INVALID_ACCESS_TOKEN, RefreshTokenLedger
from pointatlas.services._shared.result import Result
from pointatlas.services.auth.dto import AuthTokenConfig
from pointatlas.services.auth.service import SessionManager
from pointatlas.services.markers import MarkerCommandService, MarkerQueryService

F = TypeVar("F", bound=Callable[..., Any])
T = TypeVar("T")

log = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "
_LEDGER_KEY = "pointatlas.refresh_ledger"


# ------------------------------ Responses -------------------------------- #


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def unwrap_or_raise(result: Result[T]) -> T:
    """
    Return the value of a successful result, or raise the matching API error.

    :raises pointatlas.core.errors.APIError: For any failed result.
    """

    if result.is_failure:
        raise api_error_for(result.status_code, result.error or "")
    return cast(T, result.value)


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            log.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


# ------------------------------ Principal -------------------------------- #


def bearer_token() -> str | None:
    """Return the raw token from ``Authorization: Bearer ...`` (or ``None``)."""

    header = request.headers.get("Authorization", "")
    if not header.lower().startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX) :].strip()
    return token or None


def require_principal(func: F) -> F:
    """
    Resolve the caller from the bearer access token.

    The verified principal is passed to the view as the ``principal``
    keyword argument. A missing or invalid token is a 401.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        token = bearer_token()
        if token is None:
            raise Unauthorized(INVALID_ACCESS_TOKEN)
        principal = unwrap_or_raise(get_token_provider().validate_access_token(token))
        kwargs["principal"] = principal
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


# ---------------------------- Service wiring ----------------------------- #


def get_token_provider() -> JWTTokenProvider:
    return JWTTokenProvider()


def build_refresh_ledger(app: Flask) -> RefreshTokenLedger:
    """Pick the refresh token ledger from ``REFRESH_LEDGER_BACKEND``."""

    backend = str(app.config.get("REFRESH_LEDGER_BACKEND", "sql")).lower()
    if backend == "redis":
        return RedisRefreshTokenLedger(get_redis())
    return SqlRefreshTokenLedger()


def get_refresh_ledger() -> RefreshTokenLedger:
    """Return the app-wide ledger, built on first use."""

    app = current_app._get_current_object()  # type: ignore[attr-defined]
    ledger = app.extensions.get(_LEDGER_KEY)
    if ledger is None:
        ledger = build_refresh_ledger(app)
        app.extensions[_LEDGER_KEY] = ledger
    return cast(RefreshTokenLedger, ledger)


def get_session_manager() -> SessionManager:
    minutes = int(current_app.config["REFRESH_TOKEN_EXPIRES_MINUTES"])
    return SessionManager(
        credentials=SqlCredentialStore(),
        tokens=get_token_provider(),
        ledger=get_refresh_ledger(),
        token_cfg=AuthTokenConfig(refresh_expires=timedelta(minutes=minutes)),
    )


def get_marker_queries() -> MarkerQueryService:
    return MarkerQueryService(max_page_size=int(current_app.config["MARKERS_MAX_PAGE_SIZE"]))


def get_marker_commands() -> MarkerCommandService:
    return MarkerCommandService()

