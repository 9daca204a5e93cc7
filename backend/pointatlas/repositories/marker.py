"""Marker repository: candidate retrieval for the query engine."""

from __future__ import annotations

from typing import Any

from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.orm import joinedload

from pointatlas.models.marker import Marker
from pointatlas.repositories.base import BaseRepository, apply_sorting

NEWEST_FIRST = ("-created_at",)


def _in_box(box: tuple[float, float, float, float] | None) -> list[ColumnElement[bool]]:
    if box is None:
        return []
    min_lat, max_lat, min_lng, max_lng = box
    return [
        Marker.latitude >= min_lat,
        Marker.latitude <= max_lat,
        Marker.longitude >= min_lng,
        Marker.longitude <= max_lng,
    ]


class MarkerRepository(BaseRepository[Marker]):
    """Persistence-only repository for :class:`Marker`.

    Every read eagerly loads ``created_by`` so DTO conversion can read the
    owner's display name without an extra round trip per row.
    """

    model = Marker

    def _default_eagerload(self, stmt: Select[Any]) -> Select[Any]:
        return stmt.options(joinedload(Marker.created_by))

    def _sortable_fields(self):
        return {"created_at": Marker.created_at, "title": Marker.title}

    def _updatable_fields(self) -> set[str]:
        return {"title", "description", "latitude", "longitude", "category", "properties"}

    def _newest_first(self, stmt: Select[Any]) -> Select[Any]:
        return apply_sorting(stmt, self._sortable_fields(), NEWEST_FIRST, pk_attr=Marker.id)

    def list_all(self) -> list[Marker]:
        """Return every marker, newest first."""
        return self.list(sort=NEWEST_FIRST)

    def list_in_bounds(
        self,
        *,
        min_lat: float,
        max_lat: float,
        min_lng: float,
        max_lng: float,
    ) -> list[Marker]:
        """Return markers inside the inclusive box, newest first.

        :param min_lat: Southern edge in degrees.
        :param max_lat: Northern edge in degrees.
        :param min_lng: Western edge in degrees.
        :param max_lng: Eastern edge in degrees.
        """
        stmt = self._default_eagerload(select(Marker)).where(
            *_in_box((min_lat, max_lat, min_lng, max_lng))
        )
        return list(self.session.execute(self._newest_first(stmt)).scalars().unique().all())

    def list_near(self, *, box: tuple[float, float, float, float] | None) -> list[Marker]:
        """Return radius-query candidates.

        :param box: ``(min_lat, max_lat, min_lng, max_lng)`` prefilter, or
            ``None`` when the search circle wraps a pole or the antimeridian
            and every marker must be considered.
        """
        if box is None:
            return self.list_all()
        min_lat, max_lat, min_lng, max_lng = box
        return self.list_in_bounds(
            min_lat=min_lat, max_lat=max_lat, min_lng=min_lng, max_lng=max_lng
        )

    def page_newest_first(
        self,
        *,
        box: tuple[float, float, float, float] | None,
        offset: int,
        limit: int,
    ) -> tuple[list[Marker], int]:
        """Return one page of markers newest first, plus the total match count.

        Ordering and paging run in the database; only the optional box is
        applied as a filter.
        """
        conditions = _in_box(box)
        total = self.session.execute(
            select(func.count()).select_from(Marker).where(*conditions)
        ).scalar_one()
        stmt = self._newest_first(self._default_eagerload(select(Marker)).where(*conditions))
        rows = self.session.execute(stmt.offset(offset).limit(limit)).scalars().unique().all()
        return list(rows), int(total)
