from __future__ import annotations

import logging
import math
from dataclasses import replace

from pointatlas.repositories.marker import MarkerRepository
from pointatlas.services._shared.base import BaseService, Clock
from pointatlas.services._shared.dto import PageOut
from pointatlas.services._shared.policies.common import can_modify
from pointatlas.services._shared.principal import Principal
from pointatlas.services._shared.result import Result

from . import engine
from ._converters import marker_to_out
from .dto import MarkerFilter, MarkerOut, NearbyIn, NearbyMarkerOut

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGE_SIZE = 500


def marker_not_found(marker_id: str) -> str:
    return f"Marker with ID {marker_id} not found"


def _has_text_filter(flt: MarkerFilter) -> bool:
    return any(value is not None and value.strip() for value in (flt.category, flt.search))


class MarkerQueryService(BaseService):
    """
    Read side of markers: filtered pages, single lookups, radius search and
    the modify-permission check.

    Reads always go to storage; nothing is cached between calls.
    """

    def __init__(
        self, *, max_page_size: int = DEFAULT_MAX_PAGE_SIZE, clock: Clock | None = None
    ) -> None:
        super().__init__(clock=clock)
        self.max_page_size = max_page_size

    def list(self, flt: MarkerFilter) -> Result[PageOut[MarkerOut]]:
        """
        Return one page of markers matching ``flt``, newest first.

        Out-of-range paging is clamped: ``page`` to at least 1, ``page_size``
        into ``[1, max_page_size]``. When all four bounds are present the box
        is pushed down to storage. Without category or search the ordering and
        paging are pushed down as well; text matching stays in Python.
        """
        page, page_size = self.ensure_pagination(
            page=flt.page, page_size=flt.page_size, max_page_size=self.max_page_size
        )
        flt = replace(flt, page=page, page_size=page_size)
        box = engine.BoundingBox.from_filter(flt)

        if not _has_text_filter(flt):
            return self._list_paged_in_storage(flt, box)

        with self.ro_uow() as uow:
            repo: MarkerRepository = uow.markers
            if box is not None:
                rows = repo.list_in_bounds(
                    min_lat=box.min_lat,
                    max_lat=box.max_lat,
                    min_lng=box.min_lng,
                    max_lng=box.max_lng,
                )
            else:
                rows = repo.list_all()
            candidates = [marker_to_out(row) for row in rows]

        result = engine.run_query(candidates, flt)
        logger.info("Listed markers", extra={"count": result.total_count})
        return Result.success(result)

    def _list_paged_in_storage(
        self, flt: MarkerFilter, box: engine.BoundingBox | None
    ) -> Result[PageOut[MarkerOut]]:
        with self.ro_uow() as uow:
            rows, total = uow.markers.page_newest_first(
                box=box.as_tuple() if box else None,
                offset=(flt.page - 1) * flt.page_size,
                limit=flt.page_size,
            )
            items = [marker_to_out(row) for row in rows]

        logger.info("Listed markers", extra={"count": total})
        return Result.success(
            PageOut(
                items=items,
                total_count=total,
                page=flt.page,
                page_size=flt.page_size,
                total_pages=math.ceil(total / flt.page_size),
            )
        )

    def get(self, marker_id: str) -> Result[MarkerOut]:
        with self.ro_uow() as uow:
            row = uow.markers.get(marker_id)
            if row is None:
                return Result.not_found(marker_not_found(marker_id))
            return Result.success(marker_to_out(row))

    def nearby(self, dto: NearbyIn) -> Result[list[NearbyMarkerOut]]:
        """
        Markers within ``dto.radius_km`` of the point, nearest first.

        :returns: 400 when the radius is not positive or the centre is not a
            valid coordinate.
        """
        if not dto.radius_km > 0:
            return Result.failure("Radius must be greater than 0")
        if not -90.0 <= dto.latitude <= 90.0:
            return Result.failure("Latitude must be between -90 and 90")
        if not -180.0 <= dto.longitude <= 180.0:
            return Result.failure("Longitude must be between -180 and 180")

        box = engine.radius_bounding_box(dto.latitude, dto.longitude, dto.radius_km)
        with self.ro_uow() as uow:
            rows = uow.markers.list_near(box=box.as_tuple() if box else None)
            candidates = [marker_to_out(row) for row in rows]

        hits = engine.nearby(
            candidates, lat=dto.latitude, lng=dto.longitude, radius_km=dto.radius_km
        )
        return Result.success([NearbyMarkerOut(marker=m, distance_m=d) for m, d in hits])

    def can_modify(self, marker_id: str, principal: Principal) -> Result[bool]:
        """Whether ``principal`` may edit or delete the marker (404 if missing)."""
        with self.ro_uow() as uow:
            row = uow.markers.get(marker_id)
            if row is None:
                return Result.not_found(marker_not_found(marker_id))
            owner_id = row.created_by_id
        return Result.success(can_modify(owner_id, principal))
