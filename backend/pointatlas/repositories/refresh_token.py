"""Refresh token repository with conditional (compare-and-set) writes."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import select, update
from sqlalchemy.engine import CursorResult

from pointatlas.models.refresh_token import RefreshToken
from pointatlas.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken`.

    Revocations are issued as single ``UPDATE`` statements guarded by the
    row's current state so concurrent callers cannot both win.
    """

    model = RefreshToken

    def get_by_token(self, token: str) -> RefreshToken | None:
        stmt = select(RefreshToken).where(RefreshToken.token == token).execution_options(
            populate_existing=True
        )
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def get_active(self, token: str, *, now: datetime) -> RefreshToken | None:
        """Return the row only when it is unrevoked and unexpired at ``now``."""
        stmt = select(RefreshToken).where(
            RefreshToken.token == token,
            RefreshToken.is_revoked.is_(False),
            RefreshToken.expires_at > now,
        ).execution_options(populate_existing=True)
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def revoke_if_active(self, token: str, *, now: datetime) -> bool:
        """Revoke ``token`` only if it is currently usable.

        :returns: ``True`` when this call performed the revocation.
        """
        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.token == token,
                RefreshToken.is_revoked.is_(False),
                RefreshToken.expires_at > now,
            )
            .values(is_revoked=True, revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        result = cast(CursorResult, self.session.execute(stmt))
        return result.rowcount == 1

    def revoke_if_unrevoked(self, token: str, *, now: datetime) -> bool:
        """Revoke ``token`` unless already revoked; expired rows are included."""
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.token == token, RefreshToken.is_revoked.is_(False))
            .values(is_revoked=True, revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        result = cast(CursorResult, self.session.execute(stmt))
        return result.rowcount == 1

    def revoke_all_for_user(self, user_id: str, *, now: datetime) -> int:
        """Revoke every unrevoked token of ``user_id`` in one statement."""
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id, RefreshToken.is_revoked.is_(False))
            .values(is_revoked=True, revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        result = cast(CursorResult, self.session.execute(stmt))
        return int(result.rowcount or 0)

    def list_for_user(self, user_id: str) -> list[RefreshToken]:
        stmt = (
            select(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .order_by(RefreshToken.issued_at.asc(), RefreshToken.id.asc())
            .execution_options(populate_existing=True)
        )
        return list(self.session.execute(stmt).scalars().all())
