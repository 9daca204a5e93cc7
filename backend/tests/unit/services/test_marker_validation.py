"""Marker write rules and their client-facing messages."""

from __future__ import annotations

import pytest
from pointatlas.services.markers.dto import MarkerWriteIn
from pointatlas.services.markers.validation import marker_problems


def _dto(**overrides) -> MarkerWriteIn:
    base = {
        "title": "Central Park",
        "latitude": 40.78,
        "longitude": -73.96,
        "category": "Park",
        "description": "Big park",
        "properties": {"size": "843 acres"},
    }
    base.update(overrides)
    return MarkerWriteIn(**base)


def test_valid_payload_has_no_problems():
    assert marker_problems(_dto()) == []


def test_boundaries_are_inclusive():
    assert marker_problems(_dto(latitude=-90, longitude=180, title="abc")) == []
    assert marker_problems(_dto(latitude=90, longitude=-180, title="x" * 200)) == []


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"title": ""}, "Title is required"),
        ({"title": "   "}, "Title is required"),
        ({"title": None}, "Title is required"),
        ({"latitude": None}, "Latitude is required"),
        ({"title": "ab"}, "Title must be at least 3 characters"),
        ({"title": "x" * 201}, "Title must not exceed 200 characters"),
        ({"description": "d" * 2001}, "Description must not exceed 2000 characters"),
        ({"latitude": 90.0001}, "Latitude must be between -90 and 90"),
        ({"longitude": -180.5}, "Longitude must be between -180 and 180"),
        ({"category": ""}, "Category is required"),
        ({"category": "c" * 101}, "Category must not exceed 100 characters"),
    ],
)
def test_each_rule_reports_its_message(overrides, message):
    assert message in marker_problems(_dto(**overrides))


def test_all_problems_reported_in_field_order():
    problems = marker_problems(_dto(title="ab", latitude=100, longitude=200, category=""))
    assert problems == [
        "Title must be at least 3 characters",
        "Latitude must be between -90 and 90",
        "Longitude must be between -180 and 180",
        "Category is required",
    ]


def test_description_and_properties_are_optional():
    assert marker_problems(_dto(description=None, properties={})) == []
