"""Marker resource schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, ValidationError, fields, validate, validates_schema

_LAT_RANGE = validate.Range(min=-90, max=90, error="Latitude must be between -90 and 90")
_LNG_RANGE = validate.Range(min=-180, max=180, error="Longitude must be between -180 and 180")


class MarkerWriteSchema(Schema):
    """
    Payload for creating or replacing a marker.

    Only types are checked here. Presence, range and length rules live in
    the service, which checks them after existence and ownership.
    """

    class Meta:
        unknown = EXCLUDE

    title = fields.String(load_default=None, allow_none=True)
    description = fields.String(load_default=None, allow_none=True)
    latitude = fields.Float(load_default=None, allow_none=True)
    longitude = fields.Float(load_default=None, allow_none=True)
    category = fields.String(load_default=None, allow_none=True)
    properties = fields.Dict(keys=fields.String(), load_default=dict, allow_none=True)


class MarkerFilterSchema(Schema):
    """Supported query parameters for listing markers."""

    class Meta:
        unknown = EXCLUDE

    category = fields.String(load_default=None, validate=validate.Length(max=100))
    search = fields.String(load_default=None, validate=validate.Length(max=200))
    min_lat = fields.Float(load_default=None, data_key="minLatitude", validate=_LAT_RANGE)
    max_lat = fields.Float(load_default=None, data_key="maxLatitude", validate=_LAT_RANGE)
    min_lng = fields.Float(load_default=None, data_key="minLongitude", validate=_LNG_RANGE)
    max_lng = fields.Float(load_default=None, data_key="maxLongitude", validate=_LNG_RANGE)
    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    page_size = fields.Integer(
        load_default=None, data_key="pageSize", validate=validate.Range(min=1)
    )

    @validates_schema
    def check_bounds(self, data: dict[str, Any], **_: Any) -> None:
        """Reject inverted boxes; a box across the antimeridian is not supported."""

        if data.get("min_lat") is not None and data.get("max_lat") is not None:
            if data["min_lat"] > data["max_lat"]:
                raise ValidationError(
                    "minLatitude must not exceed maxLatitude", field_name="minLatitude"
                )
        if data.get("min_lng") is not None and data.get("max_lng") is not None:
            if data["min_lng"] > data["max_lng"]:
                raise ValidationError(
                    "minLongitude must not exceed maxLongitude (boxes crossing the "
                    "antimeridian are not supported)",
                    field_name="minLongitude",
                )


class NearbyQuerySchema(Schema):
    """Query parameters for the radius search."""

    class Meta:
        unknown = EXCLUDE

    latitude = fields.Float(required=True, validate=_LAT_RANGE)
    longitude = fields.Float(required=True, validate=_LNG_RANGE)
    radius_km = fields.Float(
        required=True,
        data_key="radiusKm",
        validate=validate.Range(min=0, min_inclusive=False, max=20_038),
    )


class MarkerSchema(Schema):
    """Public representation of a marker."""

    id = fields.String(required=True)
    title = fields.String(required=True)
    description = fields.String(allow_none=True)
    latitude = fields.Float(required=True)
    longitude = fields.Float(required=True)
    category = fields.String(required=True)
    properties = fields.Dict(keys=fields.String())
    created_by_id = fields.String(required=True, data_key="createdById")
    created_by_display_name = fields.String(required=True, data_key="createdByDisplayName")
    created_at = fields.DateTime(required=True, data_key="createdAt")
    updated_at = fields.DateTime(required=True, data_key="updatedAt")


class NearbyMarkerSchema(Schema):
    """A radius search hit: the marker plus its distance in metres."""

    marker = fields.Nested(MarkerSchema, required=True)
    distance_m = fields.Float(required=True, data_key="distanceMeters")


class MarkerPermissionSchema(Schema):
    """Answer to "may the caller modify this marker?"."""

    marker_id = fields.String(required=True, data_key="markerId")
    can_modify = fields.Boolean(required=True, data_key="canModify")
