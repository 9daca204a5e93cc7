"""Marker payload rules shared by create and update."""

from __future__ import annotations

from dataclasses import asdict

from marshmallow import Schema, ValidationError, fields, validate

from .dto import MarkerWriteIn

TITLE_MIN = 3
TITLE_MAX = 200
DESCRIPTION_MAX = 2000
CATEGORY_MAX = 100
LAT_MIN, LAT_MAX = -90.0, 90.0
LNG_MIN, LNG_MAX = -180.0, 180.0


def _not_blank(message: str):
    def _check(value: str | None) -> None:
        if value is None or not value.strip():
            raise ValidationError(message)

    return _check


class MarkerRulesSchema(Schema):
    """Field rules for a marker write, each with its client-facing message."""

    title = fields.String(
        required=True,
        error_messages={"required": "Title is required", "null": "Title is required"},
        validate=[
            _not_blank("Title is required"),
            validate.Length(min=TITLE_MIN, error="Title must be at least 3 characters"),
            validate.Length(max=TITLE_MAX, error="Title must not exceed 200 characters"),
        ],
    )
    description = fields.String(
        allow_none=True,
        validate=validate.Length(
            max=DESCRIPTION_MAX, error="Description must not exceed 2000 characters"
        ),
    )
    latitude = fields.Float(
        required=True,
        error_messages={"required": "Latitude is required", "null": "Latitude is required"},
        validate=validate.Range(
            min=LAT_MIN, max=LAT_MAX, error="Latitude must be between -90 and 90"
        ),
    )
    longitude = fields.Float(
        required=True,
        error_messages={"required": "Longitude is required", "null": "Longitude is required"},
        validate=validate.Range(
            min=LNG_MIN, max=LNG_MAX, error="Longitude must be between -180 and 180"
        ),
    )
    category = fields.String(
        required=True,
        error_messages={"required": "Category is required", "null": "Category is required"},
        validate=[
            _not_blank("Category is required"),
            validate.Length(max=CATEGORY_MAX, error="Category must not exceed 100 characters"),
        ],
    )
    properties = fields.Dict(keys=fields.String(), allow_none=True)


_RULES = MarkerRulesSchema()
# Report problems in field order, not in whatever order the schema collected them
_FIELD_ORDER = ("title", "description", "latitude", "longitude", "category", "properties")


def marker_problems(dto: MarkerWriteIn) -> list[str]:
    """
    Check ``dto`` against the marker rules.

    :returns: Every violated rule's message, in field order; empty when valid.
    """
    errors = _RULES.validate(asdict(dto))
    problems: list[str] = []
    for name in _FIELD_ORDER:
        messages = errors.get(name) or []
        if isinstance(messages, dict):
            messages = [f"{name}: {msg}" for msgs in messages.values() for msg in msgs]
        problems.extend(str(m) for m in messages)
    return problems
