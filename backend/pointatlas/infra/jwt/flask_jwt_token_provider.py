# pointatlas/infra/jwt/flask_jwt_token_provider.py
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Any, cast

from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from pointatlas.services._shared.ports import INVALID_ACCESS_TOKEN, TokenProvider
from pointatlas.services._shared.principal import Principal
from pointatlas.services._shared.result import Result

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
# 64 random bytes, URL-safe base64 (86 characters)
REFRESH_TOKEN_BYTES = 64


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    Adapter for Flask-JWT-Extended.

    Signing key, algorithm, lifetime, issuer, audience and the zero decode
    leeway are read from the Flask config (see
    :func:`pointatlas.core.config.apply_auth_settings`).

    .. note::
       Requires an active Flask app context.
    """

    def issue_access_token(self, principal: Principal) -> str:
        claims: dict[str, Any] = {
            "roles": sorted(principal.roles),
            "email": principal.email,
            "name": principal.display_name,
        }
        return cast(str, create_access_token(identity=principal.id, additional_claims=claims))

    def issue_refresh_token(self) -> str:
        return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)

    def validate_access_token(self, token: str) -> Result[Principal]:
        """
        Verify signature, issuer, audience, expiry and token type.

        Every failure collapses into one 401 so callers cannot tell an
        expired token from a forged one.
        """
        try:
            payload = cast(dict[str, Any], decode_token(token))
        except (PyJWTError, JWTExtendedException) as exc:
            logger.info("Access token rejected: %s", type(exc).__name__)
            return Result.unauthorized(INVALID_ACCESS_TOKEN)

        subject = payload.get("sub")
        if payload.get("type") != ACCESS_TOKEN_TYPE or not subject:
            logger.info("Access token rejected: wrong type or subject")
            return Result.unauthorized(INVALID_ACCESS_TOKEN)

        roles = payload.get("roles") or []
        return Result.success(
            Principal.of(
                str(subject),
                email=str(payload.get("email") or ""),
                display_name=str(payload.get("name") or ""),
                roles=[str(r) for r in roles] if isinstance(roles, list) else [],
            )
        )
