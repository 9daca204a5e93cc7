"""Marker model: a titled, categorized point on the map."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, CheckConstraint, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pointatlas.core.extensions import db

from .base import ReprMixin, TimestampMixin, UUIDPKMixin

if TYPE_CHECKING:
    from .user import User


class Marker(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Location marker owned by the user who created it.

    Fields
    ------
    title : str
        3 to 200 characters.
    description : str | None
        Up to 2000 characters.
    latitude, longitude : float
        WGS84 degrees, latitude in [-90, 90] and longitude in [-180, 180].
    category : str
        Free-form category label, compared case-insensitively by queries.
    properties : dict
        Arbitrary JSON attributes shown in the marker popup.
    created_by_id : str
        Owner. Only the owner or an Admin may modify the marker.
    """

    __tablename__ = "markers"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    properties: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_by_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    created_by: Mapped[User] = relationship(back_populates="markers")

    __table_args__ = (
        CheckConstraint("latitude >= -90 AND latitude <= 90", name="latitude_range"),
        CheckConstraint("longitude >= -180 AND longitude <= 180", name="longitude_range"),
        Index("ix_markers_lat_lng", "latitude", "longitude"),
        Index("ix_markers_category", "category"),
        Index("ix_markers_created_at", "created_at"),
        Index("ix_markers_created_by_id", "created_by_id"),
    )
