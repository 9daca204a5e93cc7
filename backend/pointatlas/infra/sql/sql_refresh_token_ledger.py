# comments in English; reST docstrings
from __future__ import annotations

import logging
from datetime import datetime

from pointatlas.models.refresh_token import RefreshToken
from pointatlas.services._shared.ports import (
    RefreshTokenLedger,
    RefreshTokenRecord,
    RotationResult,
)
from pointatlas.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

logger = logging.getLogger(__name__)


def _to_record(row: RefreshToken) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        id=row.id,
        token=row.token,
        user_id=row.user_id,
        issued_at=row.issued_at,
        expires_at=row.expires_at,
        is_revoked=row.is_revoked,
        revoked_at=row.revoked_at,
    )


def _to_row(record: RefreshTokenRecord) -> RefreshToken:
    row = RefreshToken(
        token=record.token,
        user_id=record.user_id,
        issued_at=record.issued_at,
        expires_at=record.expires_at,
        is_revoked=record.is_revoked,
        revoked_at=record.revoked_at,
    )
    if record.id:
        row.id = record.id
    return row


class SqlRefreshTokenLedger(RefreshTokenLedger):
    """
    Relational refresh token ledger.

    Each call is its own unit of work. Revocation and rotation use
    conditional ``UPDATE ... WHERE is_revoked = false`` statements and check
    the affected row count, so the database arbitrates concurrent callers.
    """

    def get(self, token: str) -> RefreshTokenRecord | None:
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            row = uow.refresh_tokens.get_by_token(token)
            return _to_record(row) if row else None

    def get_active(self, token: str, *, now: datetime) -> RefreshTokenRecord | None:
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            row = uow.refresh_tokens.get_active(token, now=now)
            return _to_record(row) if row else None

    def create(self, record: RefreshTokenRecord) -> RefreshTokenRecord:
        with SQLAlchemyUnitOfWork() as uow:
            row = uow.refresh_tokens.add(_to_row(record))
            created = _to_record(row)
        return created

    def revoke(self, token: str, *, now: datetime) -> bool:
        with SQLAlchemyUnitOfWork() as uow:
            changed = uow.refresh_tokens.revoke_if_unrevoked(token, now=now)
        return changed

    def revoke_all_for_user(self, user_id: str, *, now: datetime) -> int:
        with SQLAlchemyUnitOfWork() as uow:
            count = uow.refresh_tokens.revoke_all_for_user(str(user_id), now=now)
        logger.info("Revoked refresh tokens", extra={"user_id": user_id, "count": count})
        return count

    def rotate(
        self, *, old_token: str, successor: RefreshTokenRecord, now: datetime
    ) -> RotationResult:
        """
        Revoke ``old_token`` and insert ``successor`` in one transaction.

        :returns: ``OK`` when this call consumed the token, otherwise why not.
        :raises ValueError: If ``successor`` belongs to another user.
        """
        with SQLAlchemyUnitOfWork() as uow:
            repo = uow.refresh_tokens
            if repo.revoke_if_active(old_token, now=now):
                consumed = repo.get_by_token(old_token)
                if consumed is None or consumed.user_id != successor.user_id:
                    raise ValueError("Successor token must belong to the same user.")
                repo.add(_to_row(successor))
                return RotationResult.OK

            current = repo.get_by_token(old_token)
            if current is None:
                return RotationResult.NOT_FOUND
            if current.is_revoked:
                return RotationResult.REVOKED
            return RotationResult.EXPIRED

    def list_for_user(self, user_id: str) -> list[RefreshTokenRecord]:
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            return [_to_record(row) for row in uow.refresh_tokens.list_for_user(str(user_id))]
