from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from pointatlas.models.marker import Marker
from pointatlas.repositories.marker import MarkerRepository
from pointatlas.services._shared.base import BaseService
from pointatlas.services._shared.policies.common import can_modify
from pointatlas.services._shared.principal import Principal
from pointatlas.services._shared.result import Result

from ._converters import marker_to_out
from .dto import MarkerOut, MarkerWriteIn
from .query import marker_not_found
from .validation import marker_problems

logger = logging.getLogger(__name__)

EDIT_FORBIDDEN = "You can only edit your own markers"
DELETE_FORBIDDEN = "You can only delete your own markers"


def _normalized(dto: MarkerWriteIn) -> MarkerWriteIn:
    """Trim title and category so the length rules see the stored values."""
    return replace(
        dto,
        title=dto.title.strip() if isinstance(dto.title, str) else dto.title,
        category=dto.category.strip() if isinstance(dto.category, str) else dto.category,
    )


def _fields_of(dto: MarkerWriteIn) -> dict[str, Any]:
    return {
        "title": dto.title,
        "description": dto.description,
        "latitude": float(dto.latitude),
        "longitude": float(dto.longitude),
        "category": dto.category,
        "properties": dict(dto.properties or {}),
    }


class MarkerCommandService(BaseService):
    """
    Marker mutations.

    Ordering of checks on update and delete: existence (404), then the
    owner-or-admin policy (403), then payload validation (400).
    """

    def create(self, dto: MarkerWriteIn, principal: Principal) -> Result[MarkerOut]:
        dto = _normalized(dto)
        problems = marker_problems(dto)
        if problems:
            return Result.failure("; ".join(problems))

        with self.rw_uow() as uow:
            repo: MarkerRepository = uow.markers
            now = self.now()
            row = Marker(
                created_by_id=principal.id,
                created_at=now,
                updated_at=now,
                **_fields_of(dto),
            )
            repo.add(row)
            # Owner name is looked up explicitly rather than lazy-loaded
            owner_name = uow.users.display_name_of(principal.id)
            out = marker_to_out(row, owner_display_name=owner_name or "")

        logger.info("Marker created", extra={"marker_id": out.id, "user_id": principal.id})
        return Result.success(out, status_code=201)

    def update(
        self, marker_id: str, dto: MarkerWriteIn, principal: Principal
    ) -> Result[MarkerOut]:
        with self.rw_uow() as uow:
            repo: MarkerRepository = uow.markers
            row = repo.get(marker_id)
            if row is None:
                return Result.not_found(marker_not_found(marker_id))
            if not can_modify(row.created_by_id, principal):
                logger.info(
                    "Marker edit refused", extra={"marker_id": marker_id, "user_id": principal.id}
                )
                return Result.forbidden(EDIT_FORBIDDEN)

            dto = _normalized(dto)
            problems = marker_problems(dto)
            if problems:
                return Result.failure("; ".join(problems))

            fields = _fields_of(dto)
            changed = any(getattr(row, k) != v for k, v in fields.items())
            repo.assign_updates(row, fields, flush=False)
            if changed:
                row.updated_at = self.now()
            repo.flush()
            owner_name = uow.users.display_name_of(row.created_by_id)
            out = marker_to_out(row, owner_display_name=owner_name or "")

        logger.info("Marker updated", extra={"marker_id": marker_id, "user_id": principal.id})
        return Result.success(out)

    def delete(self, marker_id: str, principal: Principal) -> Result[None]:
        with self.rw_uow() as uow:
            repo: MarkerRepository = uow.markers
            row = repo.get(marker_id)
            if row is None:
                return Result.not_found(marker_not_found(marker_id))
            if not can_modify(row.created_by_id, principal):
                logger.info(
                    "Marker delete refused",
                    extra={"marker_id": marker_id, "user_id": principal.id},
                )
                return Result.forbidden(DELETE_FORBIDDEN)
            repo.delete(row)

        logger.info("Marker deleted", extra={"marker_id": marker_id, "user_id": principal.id})
        return Result.success(None)
