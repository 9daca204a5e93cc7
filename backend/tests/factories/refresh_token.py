"""Factory Boy definition for :class:`pointatlas.models.refresh_token.RefreshToken`."""

from __future__ import annotations

import secrets
from datetime import timedelta

import factory

from pointatlas.models.base import utcnow
from pointatlas.models.refresh_token import RefreshToken
from tests.factories import BaseFactory
from tests.factories.user import UserFactory


class RefreshTokenFactory(BaseFactory):
    """Unrevoked refresh tokens valid for a week from ``issued_at``."""

    class Meta:
        model = RefreshToken

    token = factory.LazyFunction(lambda: secrets.token_urlsafe(32))
    user_id = factory.LazyFunction(lambda: UserFactory().id)
    issued_at = factory.LazyFunction(utcnow)
    expires_at = factory.LazyAttribute(lambda o: o.issued_at + timedelta(days=7))
    is_revoked = False
    revoked_at = None
