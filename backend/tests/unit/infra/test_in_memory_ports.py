# tests/unit/infra/test_in_memory_ports.py
"""The in-memory ports must honour the same contracts as the real adapters."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime, timedelta

import pytest
from pointatlas.services._shared.ports import (
    InMemoryCredentialStore,
    InMemoryRefreshTokenLedger,
    RefreshTokenRecord,
    RotationResult,
    StubTokenProvider,
)
from pointatlas.services._shared.principal import Principal

NOW = datetime(2025, 1, 1, tzinfo=UTC)


def _record(token: str, user_id: str = "u1") -> RefreshTokenRecord:
    return RefreshTokenRecord.new(
        token=token, user_id=user_id, issued_at=NOW, expires_at=NOW + timedelta(days=1)
    )


class TestInMemoryLedger:
    def test_rotation_is_single_use(self):
        ledger = InMemoryRefreshTokenLedger()
        ledger.create(_record("old"))
        assert ledger.rotate(old_token="old", successor=_record("n1"), now=NOW) is RotationResult.OK
        assert (
            ledger.rotate(old_token="old", successor=_record("n2"), now=NOW)
            is RotationResult.REVOKED
        )

    def test_duplicate_token_raises(self):
        ledger = InMemoryRefreshTokenLedger()
        ledger.create(_record("t"))
        with pytest.raises(ValueError):
            ledger.create(_record("t"))

    def test_usable_window_is_half_open(self):
        record = _record("t")
        assert record.is_usable(NOW)
        assert not record.is_usable(record.expires_at)


class TestInMemoryCredentialStore:
    def test_create_verify_and_roles(self):
        store = InMemoryCredentialStore()
        user = store.create_user(
            email="A@Example.com", password="Str0ng!pass", display_name="A"
        ).unwrap()
        store.add_to_role(user.id, "User")
        assert store.verify_password(user.id, "Str0ng!pass")
        assert store.roles_of(user.id) == frozenset({"User"})
        assert store.find_by_email("a@example.com").roles == frozenset({"User"})


class TestStubTokenProvider:
    def test_revoked_access_token_fails(self):
        tokens = StubTokenProvider()
        token = tokens.issue_access_token(Principal.of("u1"))
        assert tokens.validate_access_token(token).is_success
        tokens.revoke_access(token)
        assert tokens.validate_access_token(token).status_code == 401


def test_concurrent_rotations_of_one_token_have_a_single_winner():
    ledger = InMemoryRefreshTokenLedger()
    ledger.create(_record("shared"))
    racers = 8
    start = threading.Barrier(racers)

    def _rotate(i: int) -> RotationResult:
        start.wait()
        return ledger.rotate(old_token="shared", successor=_record(f"next-{i}"), now=NOW)

    with ThreadPoolExecutor(max_workers=racers) as pool:
        outcomes = list(pool.map(_rotate, range(racers)))

    assert outcomes.count(RotationResult.OK) == 1
    assert outcomes.count(RotationResult.REVOKED) == racers - 1
    live = [i for i in range(racers) if ledger.get(f"next-{i}") is not None]
    assert len(live) == 1
