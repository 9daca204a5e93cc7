"""Persisted refresh tokens (the SQL side of the refresh token ledger)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from pointatlas.core.extensions import db

from .base import ReprMixin, UTCDateTime, UUIDPKMixin, utcnow


class RefreshToken(UUIDPKMixin, ReprMixin, db.Model):
    """
    Opaque refresh token bound to one user.

    A row is usable while ``is_revoked`` is false and ``expires_at`` lies in
    the future. Rows are never deleted by the application; revocation flips
    ``is_revoked`` and stamps ``revoked_at`` exactly once.
    """

    __tablename__ = "refresh_tokens"

    token: Mapped[str] = mapped_column(String(128), nullable=False)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    issued_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    is_revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    revoked_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    __table_args__ = (
        UniqueConstraint("token", name="uq_refresh_tokens_token"),
        Index("ix_refresh_tokens_user_id", "user_id"),
    )
