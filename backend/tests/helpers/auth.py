"""Authentication helpers for tests."""

from __future__ import annotations

from datetime import timedelta

from flask_jwt_extended import create_access_token

from pointatlas.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from pointatlas.models.user import User
from pointatlas.services._shared.principal import Principal


def principal_of(user: User) -> Principal:
    """Build the principal a verified token for ``user`` would yield."""

    return Principal.of(
        user.id, email=user.email, display_name=user.display_name, roles=user.role_names
    )


def issue_token(user: User) -> str:
    """Generate a valid access JWT for ``user`` (needs an app context)."""

    return JWTTokenProvider().issue_access_token(principal_of(user))


def expired_token(user: User) -> str:
    """Return an already expired access JWT for ``user``."""

    return create_access_token(identity=user.id, expires_delta=timedelta(seconds=-1))


def auth_header(token: str) -> dict[str, str]:
    """Authorization header for authenticated requests."""

    return {"Authorization": f"Bearer {token}"}
