# tests/unit/services/test_session_manager.py
"""
SessionManager against in-memory doubles.

No database or Flask app: credentials, tokens and the refresh ledger are the
in-memory ports, and the clock is a mutable fixture.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from pointatlas.services._shared.ports import (
    InMemoryCredentialStore,
    InMemoryRefreshTokenLedger,
    RotationResult,
    StubTokenProvider,
)
from pointatlas.services.auth.dto import AuthTokenConfig, LoginIn, RefreshIn, RegisterIn
from pointatlas.services.auth.service import (
    DUPLICATE_EMAIL,
    INVALID_CREDENTIALS,
    INVALID_REFRESH_TOKEN,
    SessionManager,
)

PASSWORD = "Str0ng!pass"


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RacedLedger:
    """Ledger whose token is still active on read but already rotated on write."""

    def __init__(self, inner: InMemoryRefreshTokenLedger) -> None:
        self.inner = inner

    def __getattr__(self, name):
        return getattr(self.inner, name)

    def rotate(self, *, old_token, successor, now) -> RotationResult:
        return RotationResult.REVOKED


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def manager(clock) -> SessionManager:
    """Build a SessionManager wired to in-memory doubles."""
    return SessionManager(
        credentials=InMemoryCredentialStore(),
        tokens=StubTokenProvider(),
        ledger=InMemoryRefreshTokenLedger(),
        token_cfg=AuthTokenConfig(refresh_expires=timedelta(days=7)),
        clock=clock,
    )


def _register(manager: SessionManager, email: str = "ana@example.com"):
    return manager.register(RegisterIn(email=email, password=PASSWORD, display_name="Ana"))


# -------------------------------- Register -------------------------------- #
class TestRegister:
    def test_creates_user_in_default_role_and_signs_in(self, manager):
        result = _register(manager)
        assert result.is_success
        out = result.unwrap()
        assert out.user.email == "ana@example.com"
        assert out.user.roles == ["User"]
        assert out.access_token.startswith("access.")
        record = manager.ledger.get(out.refresh_token)
        assert record is not None and record.user_id == out.user.id

    def test_duplicate_email_is_conflict(self, manager):
        _register(manager)
        again = _register(manager, email="ANA@example.com ")
        assert again.status_code == 409
        assert again.error == DUPLICATE_EMAIL

    def test_weak_password_lists_every_rule(self, manager):
        result = manager.register(
            RegisterIn(email="b@example.com", password="short", display_name="B")
        )
        assert result.status_code == 400
        assert result.error.startswith("Failed to create user: ")
        assert "at least 8 characters" in result.error
        assert "at least one digit" in result.error


# --------------------------------- Login ---------------------------------- #
class TestLogin:
    def test_valid_credentials_issue_new_session(self, manager):
        first = _register(manager).unwrap()
        second = manager.login(LoginIn(email="ana@example.com", password=PASSWORD)).unwrap()
        assert second.refresh_token != first.refresh_token
        assert second.user.id == first.user.id

    @pytest.mark.parametrize(
        ("email", "password"),
        [("ana@example.com", "Wrong!pass1"), ("nobody@example.com", PASSWORD)],
    )
    def test_unknown_email_and_wrong_password_look_the_same(self, manager, email, password):
        _register(manager)
        result = manager.login(LoginIn(email=email, password=password))
        assert result.status_code == 401
        assert result.error == INVALID_CREDENTIALS


# -------------------------------- Refresh --------------------------------- #
class TestRefresh:
    def test_rotation_consumes_presented_token(self, manager):
        pair = _register(manager).unwrap()

        rotated = manager.refresh(RefreshIn(refresh_token=pair.refresh_token)).unwrap()
        assert rotated.refresh_token != pair.refresh_token
        assert manager.ledger.get(pair.refresh_token).is_revoked is True
        assert manager.ledger.get(rotated.refresh_token).is_revoked is False

        replay = manager.refresh(RefreshIn(refresh_token=pair.refresh_token))
        assert replay.status_code == 401
        assert replay.error == INVALID_REFRESH_TOKEN

    def test_successor_expiry_counts_from_rotation(self, manager, clock):
        pair = _register(manager).unwrap()
        clock.advance(days=3)
        rotated = manager.refresh(RefreshIn(refresh_token=pair.refresh_token)).unwrap()
        record = manager.ledger.get(rotated.refresh_token)
        assert record.issued_at == clock.now
        assert record.expires_at == clock.now + timedelta(days=7)

    def test_expired_token_is_rejected(self, manager, clock):
        pair = _register(manager).unwrap()
        clock.advance(days=7)
        result = manager.refresh(RefreshIn(refresh_token=pair.refresh_token))
        assert result.status_code == 401

    def test_unknown_token_is_rejected(self, manager):
        assert manager.refresh(RefreshIn(refresh_token="nope")).status_code == 401

    def test_token_of_deleted_user_is_rejected(self, manager):
        pair = _register(manager).unwrap()
        manager.credentials.remove(pair.user.id)
        result = manager.refresh(RefreshIn(refresh_token=pair.refresh_token))
        assert result.status_code == 401
        assert result.error == INVALID_REFRESH_TOKEN

    def test_rotation_lost_to_a_concurrent_refresh_is_rejected(self, manager):
        pair = _register(manager).unwrap()
        manager.ledger = RacedLedger(manager.ledger)

        result = manager.refresh(RefreshIn(refresh_token=pair.refresh_token))
        assert result.status_code == 401
        assert result.error == INVALID_REFRESH_TOKEN
        assert manager.ledger.inner.get(pair.refresh_token).is_revoked is False


# ------------------------------ Logout / me ------------------------------- #
class TestLogoutAndMe:
    def test_logout_revokes_every_refresh_token(self, manager):
        first = _register(manager).unwrap()
        second = manager.login(LoginIn(email="ana@example.com", password=PASSWORD)).unwrap()

        assert manager.logout(first.user.id).is_success
        for token in (first.refresh_token, second.refresh_token):
            assert manager.refresh(RefreshIn(refresh_token=token)).status_code == 401

    def test_logout_without_sessions_still_succeeds(self, manager):
        assert manager.logout("ghost").is_success

    def test_revocation_timestamp_is_not_moved(self, manager, clock):
        pair = _register(manager).unwrap()
        manager.logout(pair.user.id)
        stamped = manager.ledger.get(pair.refresh_token).revoked_at
        clock.advance(hours=1)
        manager.logout(pair.user.id)
        assert manager.ledger.get(pair.refresh_token).revoked_at == stamped

    def test_current_user(self, manager):
        pair = _register(manager).unwrap()
        me = manager.get_current_user(pair.user.id).unwrap()
        assert me.display_name == "Ana"
        assert manager.get_current_user("missing").status_code == 404
