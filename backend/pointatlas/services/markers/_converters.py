from __future__ import annotations

from pointatlas.models.marker import Marker

from .dto import MarkerOut


def marker_to_out(row: Marker, *, owner_display_name: str | None = None) -> MarkerOut:
    """
    Convert a marker row to its public DTO.

    :param owner_display_name: Explicitly fetched owner name; when omitted the
        eagerly loaded ``created_by`` relationship is read.
    """
    if owner_display_name is None:
        owner_display_name = row.created_by.display_name if row.created_by else ""
    return MarkerOut(
        id=row.id,
        title=row.title,
        description=row.description,
        latitude=row.latitude,
        longitude=row.longitude,
        category=row.category,
        properties=dict(row.properties or {}),
        created_by_id=row.created_by_id,
        created_by_display_name=owner_display_name,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
