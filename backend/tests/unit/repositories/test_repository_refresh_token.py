# tests/unit/repositories/test_repository_refresh_token.py
from __future__ import annotations

from datetime import timedelta

import pytest
from pointatlas.models.base import utcnow
from pointatlas.repositories.refresh_token import RefreshTokenRepository
from tests.factories.refresh_token import RefreshTokenFactory


@pytest.fixture()
def repo(session) -> RefreshTokenRepository:
    return RefreshTokenRepository(session=session)


def test_revoke_if_active_wins_once(repo):
    row = RefreshTokenFactory()
    now = utcnow()
    assert repo.revoke_if_active(row.token, now=now) is True
    assert repo.revoke_if_active(row.token, now=now) is False
    assert repo.get_by_token(row.token).is_revoked is True


def test_revoke_if_active_skips_expired(repo):
    issued = utcnow() - timedelta(days=10)
    row = RefreshTokenFactory(issued_at=issued)
    assert repo.revoke_if_active(row.token, now=utcnow()) is False
    assert repo.revoke_if_unrevoked(row.token, now=utcnow()) is True


def test_get_active_filters_state(repo):
    row = RefreshTokenFactory()
    now = utcnow()
    assert repo.get_active(row.token, now=now) is not None
    assert repo.get_active(row.token, now=row.expires_at) is None
