# comments in English; strict reST docstrings
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

# ------------------------------ Input DTOs ------------------------------- #


@dataclass(frozen=True, slots=True)
class MarkerWriteIn:
    """
    Payload for creating or fully updating a marker.

    :param title: 3 to 200 characters.
    :type title: str
    :param latitude: Degrees in ``[-90, 90]``.
    :type latitude: float
    :param longitude: Degrees in ``[-180, 180]``.
    :type longitude: float
    :param category: Non-blank label, at most 100 characters.
    :type category: str
    :param description: Optional text, at most 2000 characters.
    :type description: str | None
    :param properties: Opaque attributes (may be empty).
    :type properties: dict[str, Any]
    """

    title: str
    latitude: float
    longitude: float
    category: str
    description: str | None = None
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class MarkerFilter:
    """
    Collection query. Bounds apply only when all four are present.

    :param category: Case-insensitive exact category match.
    :type category: str | None
    :param search: Case-insensitive substring of title or description.
    :type search: str | None
    :param min_lat: Southern edge.
    :param max_lat: Northern edge.
    :param min_lng: Western edge.
    :param max_lng: Eastern edge.
    :param page: 1-based page number.
    :type page: int
    :param page_size: Items per page.
    :type page_size: int
    """

    category: str | None = None
    search: str | None = None
    min_lat: float | None = None
    max_lat: float | None = None
    min_lng: float | None = None
    max_lng: float | None = None
    page: int = 1
    page_size: int = 100


@dataclass(frozen=True, slots=True)
class NearbyIn:
    """
    Radius query around a point.

    :param latitude: Centre latitude.
    :param longitude: Centre longitude.
    :param radius_km: Search radius in kilometres (> 0).
    """

    latitude: float
    longitude: float
    radius_km: float


# ------------------------------ Output DTOs ------------------------------ #


@dataclass(frozen=True, slots=True)
class MarkerOut:
    """
    Public projection of a marker.

    :param created_by_display_name: Owner's display name at read time.
    :type created_by_display_name: str
    """

    id: str
    title: str
    description: str | None
    latitude: float
    longitude: float
    category: str
    properties: dict[str, Any]
    created_by_id: str
    created_by_display_name: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class NearbyMarkerOut:
    """A radius query hit and its great-circle distance in metres."""

    marker: MarkerOut
    distance_m: float
