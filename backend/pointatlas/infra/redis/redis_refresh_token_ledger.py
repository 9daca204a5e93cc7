# comments in English; reST docstrings
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

import redis  # type: ignore[import-untyped]

from pointatlas.services._shared.ports import (
    RefreshTokenLedger,
    RefreshTokenRecord,
    RotationResult,
)

logger = logging.getLogger(__name__)


def _b(value: bytes | str | None, default: str = "") -> str:
    if value is None:
        return default
    return value.decode() if isinstance(value, bytes | bytearray) else str(value)


def _ts(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat()


def _dt(raw: str) -> datetime:
    return datetime.fromisoformat(raw).astimezone(UTC)


@dataclass(slots=True)
class RedisRefreshTokenLedger(RefreshTokenLedger):
    """
    Redis-backed refresh token ledger with atomic rotation.

    Each token is a hash ``rt:{token}`` living until its own expiry; a set
    ``rt:u:{user_id}`` indexes the tokens of each user. State changes use
    WATCH/MULTI/EXEC (optimistic locking) and retry on ``WatchError``.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(token: str) -> str:
        return f"rt:{token}"

    @staticmethod
    def _ku(user_id: str) -> str:
        return f"rt:u:{user_id}"

    @staticmethod
    def _ttl(expires_at: datetime, now: datetime) -> int:
        return max(1, int((expires_at - now).total_seconds()))

    @staticmethod
    def _mapping(record: RefreshTokenRecord) -> dict[str, str]:
        return {
            "id": record.id or str(uuid4()),
            "user_id": record.user_id,
            "issued_at": _ts(record.issued_at),
            "expires_at": _ts(record.expires_at),
            "revoked": "1" if record.is_revoked else "0",
            "revoked_at": _ts(record.revoked_at) if record.revoked_at else "",
        }

    def _from_hash(self, token: str, h: dict[bytes, bytes]) -> RefreshTokenRecord:
        revoked_at = _b(h.get(b"revoked_at"))
        return RefreshTokenRecord(
            id=_b(h.get(b"id")),
            token=token,
            user_id=_b(h.get(b"user_id")),
            issued_at=_dt(_b(h.get(b"issued_at"))),
            expires_at=_dt(_b(h.get(b"expires_at"))),
            is_revoked=_b(h.get(b"revoked"), "0") == "1",
            revoked_at=_dt(revoked_at) if revoked_at else None,
        )

    # -------------------- API ------------------------

    def get(self, token: str) -> RefreshTokenRecord | None:
        h = self.r.hgetall(self._k(token))
        return self._from_hash(token, h) if h else None

    def get_active(self, token: str, *, now: datetime) -> RefreshTokenRecord | None:
        record = self.get(token)
        if record is None or not record.is_usable(now):
            return None
        return record

    def create(self, record: RefreshTokenRecord) -> RefreshTokenRecord:
        """
        Insert the token *before* it is handed to the client, so there is no
        window where a client holds a token without a server-side record.
        """
        mapping = self._mapping(record)
        key = self._k(record.token)
        with self.r.pipeline(transaction=True) as pipe:
            pipe.hset(key, mapping=mapping)
            pipe.expire(key, self._ttl(record.expires_at, record.issued_at))
            pipe.sadd(self._ku(record.user_id), record.token)
            pipe.execute()
        return RefreshTokenRecord(
            id=mapping["id"],
            token=record.token,
            user_id=record.user_id,
            issued_at=record.issued_at,
            expires_at=record.expires_at,
            is_revoked=record.is_revoked,
            revoked_at=record.revoked_at,
        )

    def revoke(self, token: str, *, now: datetime) -> bool:
        key = self._k(token)
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    h = p.hgetall(key)
                    if not h or _b(h.get(b"revoked"), "0") == "1":
                        p.unwatch()
                        return False
                    p.multi()
                    p.hset(key, mapping={"revoked": "1", "revoked_at": _ts(now)})
                    p.execute()
                    return True
            except redis.WatchError:
                continue

    def revoke_all_for_user(self, user_id: str, *, now: datetime) -> int:
        key_u = self._ku(str(user_id))
        tokens = sorted(_b(member) for member in self.r.smembers(key_u))
        revoked = sum(1 for token in tokens if self.revoke(token, now=now))
        # Drop index entries whose hash already expired
        stale = [t for t in tokens if not self.r.exists(self._k(t))]
        if stale:
            self.r.srem(key_u, *stale)
        logger.info("Revoked refresh tokens", extra={"user_id": user_id, "count": revoked})
        return revoked

    def rotate(
        self, *, old_token: str, successor: RefreshTokenRecord, now: datetime
    ) -> RotationResult:
        """
        Atomically revoke ``old_token`` and create ``successor``.

        The old hash, the new hash and the user index are WATCHed; a
        concurrent change aborts EXEC and the attempt is re-evaluated, so a
        racing rotation observes the token as revoked.
        """
        k_old = self._k(old_token)
        k_new = self._k(successor.token)
        k_user = self._ku(successor.user_id)
        mapping = self._mapping(successor)

        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(k_old, k_new, k_user)
                    h = p.hgetall(k_old)
                    if not h:
                        p.unwatch()
                        return RotationResult.NOT_FOUND
                    if _b(h.get(b"revoked"), "0") == "1":
                        p.unwatch()
                        return RotationResult.REVOKED
                    if _dt(_b(h.get(b"expires_at"))) <= now:
                        p.unwatch()
                        return RotationResult.EXPIRED
                    if _b(h.get(b"user_id")) != successor.user_id:
                        p.unwatch()
                        raise ValueError("Successor token must belong to the same user.")

                    p.multi()
                    p.hset(k_old, mapping={"revoked": "1", "revoked_at": _ts(now)})
                    p.hset(k_new, mapping=mapping)
                    p.expire(k_new, self._ttl(successor.expires_at, now))
                    p.sadd(k_user, successor.token)
                    p.execute()
                return RotationResult.OK
            except redis.WatchError:
                continue

    def list_for_user(self, user_id: str) -> list[RefreshTokenRecord]:
        records = [self.get(_b(t)) for t in self.r.smembers(self._ku(str(user_id)))]
        return sorted((r for r in records if r), key=lambda r: (r.issued_at, r.id))
