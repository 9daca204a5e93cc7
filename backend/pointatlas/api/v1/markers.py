"""Marker endpoints: filtered listing, radius search and owner-scoped writes."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from pointatlas.api.deps import (
    get_marker_commands,
    get_marker_queries,
    json_response,
    require_principal,
    timing,
    unwrap_or_raise,
)
from pointatlas.schemas import (
    MarkerFilterSchema,
    MarkerPermissionSchema,
    MarkerSchema,
    MarkerWriteSchema,
    NearbyMarkerSchema,
    NearbyQuerySchema,
    build_meta,
)
from pointatlas.services._shared.principal import Principal
from pointatlas.services.markers.dto import MarkerFilter, MarkerWriteIn, NearbyIn

bp = Blueprint("markers", __name__)

filter_schema = MarkerFilterSchema()
nearby_query_schema = NearbyQuerySchema()
write_schema = MarkerWriteSchema()
marker_schema = MarkerSchema()
markers_schema = MarkerSchema(many=True)
nearby_schema = NearbyMarkerSchema(many=True)
permission_schema = MarkerPermissionSchema()


def _write_in() -> MarkerWriteIn:
    data = write_schema.load(request.get_json(silent=True) or {})
    return MarkerWriteIn(
        title=data["title"],
        description=data.get("description"),
        latitude=data["latitude"],
        longitude=data["longitude"],
        category=data["category"],
        properties=data.get("properties") or {},
    )


@bp.get("")
@timing
def list_markers():
    """List markers newest first, filtered by box, category and search."""

    args = filter_schema.load(request.args)
    page_size = args["page_size"] or int(current_app.config["MARKERS_DEFAULT_PAGE_SIZE"])
    flt = MarkerFilter(
        category=args["category"],
        search=args["search"],
        min_lat=args["min_lat"],
        max_lat=args["max_lat"],
        min_lng=args["min_lng"],
        max_lng=args["max_lng"],
        page=args["page"],
        page_size=page_size,
    )
    page = unwrap_or_raise(get_marker_queries().list(flt))
    body = {
        "data": markers_schema.dump(page.items),
        "meta": build_meta(
            total_count=page.total_count,
            page=page.page,
            page_size=page.page_size,
            total_pages=page.total_pages,
        ),
    }
    return json_response(body)


@bp.get("/nearby")
@timing
def nearby_markers():
    """Markers within ``radiusKm`` of a point, nearest first."""

    args = nearby_query_schema.load(request.args)
    hits = unwrap_or_raise(
        get_marker_queries().nearby(
            NearbyIn(
                latitude=args["latitude"],
                longitude=args["longitude"],
                radius_km=args["radius_km"],
            )
        )
    )
    return json_response({"data": nearby_schema.dump(hits), "meta": {"count": len(hits)}})


@bp.get("/<string:marker_id>")
@timing
def get_marker(marker_id: str):
    """Return a single marker."""

    marker = unwrap_or_raise(get_marker_queries().get(marker_id))
    return json_response({"data": marker_schema.dump(marker)})


@bp.get("/<string:marker_id>/permissions")
@require_principal
@timing
def marker_permissions(marker_id: str, principal: Principal):
    """Tell the caller whether it may edit or delete the marker."""

    allowed = unwrap_or_raise(get_marker_queries().can_modify(marker_id, principal))
    return json_response(
        {"data": permission_schema.dump({"marker_id": marker_id, "can_modify": allowed})}
    )


@bp.post("")
@require_principal
@timing
def create_marker(principal: Principal):
    """Create a marker owned by the caller."""

    marker = unwrap_or_raise(get_marker_commands().create(_write_in(), principal))
    response = json_response({"data": marker_schema.dump(marker)}, status=201)
    response.headers["Location"] = f"{request.base_url.rstrip('/')}/{marker.id}"
    return response


@bp.put("/<string:marker_id>")
@require_principal
@timing
def update_marker(marker_id: str, principal: Principal):
    """Replace a marker's fields. Owner or Admin only."""

    marker = unwrap_or_raise(get_marker_commands().update(marker_id, _write_in(), principal))
    return json_response({"data": marker_schema.dump(marker)})


@bp.delete("/<string:marker_id>")
@require_principal
@timing
def delete_marker(marker_id: str, principal: Principal):
    """Delete a marker. Owner or Admin only."""

    unwrap_or_raise(get_marker_commands().delete(marker_id, principal))
    return "", 204
