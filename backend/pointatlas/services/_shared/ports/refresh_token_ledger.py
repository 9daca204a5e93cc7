from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum, auto
from typing import Protocol
from uuid import uuid4


class RotationResult(Enum):
    """Outcome of an atomic refresh rotation attempt."""

    OK = auto()
    NOT_FOUND = auto()
    EXPIRED = auto()
    REVOKED = auto()


@dataclass(frozen=True, slots=True)
class RefreshTokenRecord:
    """
    Read-model for one refresh token.

    :ivar id: Row identifier.
    :ivar token: Opaque token value handed to the client.
    :ivar user_id: Owner user id.
    :ivar issued_at: Creation instant (UTC).
    :ivar expires_at: Absolute expiration (UTC).
    :ivar is_revoked: Whether the token was revoked (logout or rotation).
    :ivar revoked_at: When it was revoked; set once and never moved.
    """

    token: str
    user_id: str
    issued_at: datetime
    expires_at: datetime
    is_revoked: bool = False
    revoked_at: datetime | None = None
    id: str = ""

    @classmethod
    def new(
        cls, *, token: str, user_id: str, issued_at: datetime, expires_at: datetime
    ) -> RefreshTokenRecord:
        return cls(
            id=str(uuid4()),
            token=token,
            user_id=str(user_id),
            issued_at=issued_at,
            expires_at=expires_at,
        )

    def is_usable(self, now: datetime) -> bool:
        """Usable iff not revoked and ``now`` is strictly before expiry."""
        return not self.is_revoked and now < self.expires_at


class RefreshTokenLedger(Protocol):
    """
    Sole owner of refresh token state.

    ``revoke`` and ``revoke_all_for_user`` are idempotent. ``rotate`` is
    atomic: of two concurrent rotations of the same token exactly one
    returns ``RotationResult.OK``.
    """

    def get(self, token: str) -> RefreshTokenRecord | None:
        """Fetch a token in any state (inspection)."""

    def get_active(self, token: str, *, now: datetime) -> RefreshTokenRecord | None:
        """Fetch a token only if it is usable at ``now``."""

    def create(self, record: RefreshTokenRecord) -> RefreshTokenRecord:
        """Persist a brand-new token. Must run *before* it is handed out."""

    def revoke(self, token: str, *, now: datetime) -> bool:
        """Revoke one token. :returns: True if this call changed its state."""

    def revoke_all_for_user(self, user_id: str, *, now: datetime) -> int:
        """
        Revoke every unrevoked token of ``user_id``.

        Tokens created after the call starts may survive it.

        :returns: Number of tokens revoked by this call.
        """

    def rotate(
        self, *, old_token: str, successor: RefreshTokenRecord, now: datetime
    ) -> RotationResult:
        """Atomically revoke ``old_token`` and store ``successor``."""


class InMemoryRefreshTokenLedger(RefreshTokenLedger):
    """
    In-memory ledger with atomic rotation.

    .. note::
       A single lock guards every operation, so rotation is a true
       compare-and-swap within one process.
    """

    def __init__(self) -> None:
        self._by_token: dict[str, RefreshTokenRecord] = {}
        self._lock = threading.Lock()

    def get(self, token: str) -> RefreshTokenRecord | None:
        with self._lock:
            return self._by_token.get(token)

    def get_active(self, token: str, *, now: datetime) -> RefreshTokenRecord | None:
        with self._lock:
            record = self._by_token.get(token)
        if record is None or not record.is_usable(now):
            return None
        return record

    def create(self, record: RefreshTokenRecord) -> RefreshTokenRecord:
        if not record.id:
            record = replace(record, id=str(uuid4()))
        with self._lock:
            if record.token in self._by_token:
                raise ValueError("Refresh token already exists.")
            self._by_token[record.token] = record
        return record

    def revoke(self, token: str, *, now: datetime) -> bool:
        with self._lock:
            return self._revoke_locked(token, now)

    def revoke_all_for_user(self, user_id: str, *, now: datetime) -> int:
        with self._lock:
            owned = [t for t, r in self._by_token.items() if r.user_id == str(user_id)]
            return sum(1 for t in owned if self._revoke_locked(t, now))

    def rotate(
        self, *, old_token: str, successor: RefreshTokenRecord, now: datetime
    ) -> RotationResult:
        with self._lock:
            current = self._by_token.get(old_token)
            if current is None:
                return RotationResult.NOT_FOUND
            if current.is_revoked:
                return RotationResult.REVOKED
            if now >= current.expires_at:
                return RotationResult.EXPIRED
            if successor.user_id != current.user_id:
                raise ValueError("Successor token must belong to the same user.")
            self._revoke_locked(old_token, now)
            if not successor.id:
                successor = replace(successor, id=str(uuid4()))
            self._by_token[successor.token] = successor
            return RotationResult.OK

    def _revoke_locked(self, token: str, now: datetime) -> bool:
        record = self._by_token.get(token)
        if record is None or record.is_revoked:
            return False
        self._by_token[token] = replace(record, is_revoked=True, revoked_at=now)
        return True
