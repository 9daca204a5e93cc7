"""Marker service layer: queries, commands and the pure query engine."""

from __future__ import annotations

from .command import MarkerCommandService
from .dto import MarkerFilter, MarkerOut, MarkerWriteIn, NearbyIn, NearbyMarkerOut
from .query import MarkerQueryService

__all__ = [
    "MarkerCommandService",
    "MarkerQueryService",
    # DTOs
    "MarkerFilter",
    "MarkerOut",
    "MarkerWriteIn",
    "NearbyIn",
    "NearbyMarkerOut",
]
