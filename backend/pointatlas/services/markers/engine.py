"""
Pure marker query steps: spatial box, category, search, ordering, paging,
plus the great-circle radius query.

Nothing here touches the database. The query service hands in candidates
(already narrowed by the repository when a box is present) and every step is
re-applied here, so pushed-down and in-memory filtering agree.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, TypeVar

from pointatlas.services._shared.dto import PageOut

from .dto import MarkerFilter

# Mean Earth radius (IUGG), metres
EARTH_RADIUS_M = 6_371_008.8
METRES_PER_DEGREE_LAT = math.pi * EARTH_RADIUS_M / 180.0


class MarkerLike(Protocol):
    id: str
    title: str
    description: str | None
    latitude: float
    longitude: float
    category: str
    created_at: datetime


M = TypeVar("M", bound=MarkerLike)


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Inclusive, axis-aligned box in degrees (no antimeridian wrap)."""

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.min_lat, self.max_lat, self.min_lng, self.max_lng)

    @classmethod
    def from_filter(cls, flt: MarkerFilter) -> BoundingBox | None:
        """Return the filter's box, or ``None`` unless all four edges are set."""
        edges = (flt.min_lat, flt.max_lat, flt.min_lng, flt.max_lng)
        if any(e is None for e in edges):
            return None
        return cls(*(float(e) for e in edges))  # type: ignore[arg-type]


# ------------------------------ Filter steps ------------------------------ #


def within_box(items: Iterable[M], box: BoundingBox | None) -> list[M]:
    if box is None:
        return list(items)
    return [m for m in items if box.contains(m.latitude, m.longitude)]


def matching_category(items: Iterable[M], category: str | None) -> list[M]:
    if category is None or not category.strip():
        return list(items)
    wanted = category.casefold()
    return [m for m in items if (m.category or "").casefold() == wanted]


def matching_search(items: Iterable[M], search: str | None) -> list[M]:
    if search is None or not search.strip():
        return list(items)
    needle = search.casefold()
    return [
        m
        for m in items
        if needle in m.title.casefold() or needle in (m.description or "").casefold()
    ]


def newest_first(items: Iterable[M]) -> list[M]:
    """Sort by ``created_at`` descending, ties broken by ascending id."""
    ordered = sorted(items, key=lambda m: m.id)
    return sorted(ordered, key=lambda m: m.created_at, reverse=True)


def paginate(items: Sequence[M], *, page: int, page_size: int) -> PageOut[M]:
    """
    Slice one page out of the fully filtered, ordered sequence.

    :param page: 1-based page number (already validated, ``>= 1``).
    :param page_size: Items per page (already validated, ``>= 1``).
    """
    total = len(items)
    skip = (page - 1) * page_size
    return PageOut(
        items=list(items[skip : skip + page_size]),
        total_count=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size),
    )


def run_query(candidates: Iterable[M], flt: MarkerFilter) -> PageOut[M]:
    """Apply box, category and search, then order and paginate."""
    items = within_box(candidates, BoundingBox.from_filter(flt))
    items = matching_category(items, flt.category)
    items = matching_search(items, flt.search)
    return paginate(newest_first(items), page=flt.page, page_size=flt.page_size)


# ------------------------------ Radius query ------------------------------ #


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two WGS84 points, in metres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = phi2 - phi1
    dlmb = math.radians(lng2 - lng1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(a)))


def radius_bounding_box(lat: float, lng: float, radius_km: float) -> BoundingBox | None:
    """
    Degree box enclosing the search circle, used as a storage prefilter.

    :returns: ``None`` when the circle reaches a pole or crosses the
        antimeridian; the caller then scans every marker.
    """
    radius_m = radius_km * 1000.0
    dlat = radius_m / METRES_PER_DEGREE_LAT
    min_lat, max_lat = lat - dlat, lat + dlat
    if min_lat <= -90.0 or max_lat >= 90.0:
        return None
    # Widest longitude span occurs at the latitude edge closest to a pole
    cos_edge = math.cos(math.radians(max(abs(min_lat), abs(max_lat))))
    dlng = radius_m / (METRES_PER_DEGREE_LAT * cos_edge)
    min_lng, max_lng = lng - dlng, lng + dlng
    if min_lng < -180.0 or max_lng > 180.0:
        return None
    return BoundingBox(min_lat, max_lat, min_lng, max_lng)


def nearby(
    candidates: Iterable[M], *, lat: float, lng: float, radius_km: float
) -> list[tuple[M, float]]:
    """
    Keep candidates within ``radius_km`` of the point.

    :returns: ``(marker, distance_m)`` pairs, nearest first; equal distances
        fall back to newest first, then id.
    """
    limit_m = radius_km * 1000.0
    hits = [(m, haversine_m(lat, lng, m.latitude, m.longitude)) for m in candidates]
    hits = [(m, d) for m, d in hits if d <= limit_m]
    hits.sort(key=lambda hit: hit[0].id)
    hits.sort(key=lambda hit: hit[0].created_at, reverse=True)
    hits.sort(key=lambda hit: hit[1])
    return hits
