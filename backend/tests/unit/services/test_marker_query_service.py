# tests/unit/services/test_marker_query_service.py
from __future__ import annotations

from datetime import timedelta

import pytest
from pointatlas.models.base import utcnow
from pointatlas.services._shared.principal import Principal
from pointatlas.services.markers import MarkerFilter, MarkerQueryService, NearbyIn
from tests.factories.marker import MarkerFactory
from tests.factories.user import UserFactory


@pytest.fixture()
def service() -> MarkerQueryService:
    return MarkerQueryService(max_page_size=50)


@pytest.fixture()
def city(db):
    """Four NYC markers with distinct ages, owned by one user."""
    owner = UserFactory(display_name="Demo User")
    now = utcnow()
    spots = {
        "liberty": ("Statue of Liberty", "Landmark", 40.6892, -74.0445, 30),
        "central": ("Central Park", "Park", 40.7829, -73.9654, 20),
        "met": ("Metropolitan Museum of Art", "Museum", 40.7794, -73.9632, 10),
        "bryant": ("Bryant Park", "Park", 40.7536, -73.9832, 0),
    }
    return {
        key: MarkerFactory(
            title=title,
            category=category,
            latitude=lat,
            longitude=lng,
            created_by=owner,
            created_at=now - timedelta(days=age),
            description=None,
        )
        for key, (title, category, lat, lng, age) in spots.items()
    }


class TestList:
    def test_newest_first_with_owner_name(self, service, city):
        page = service.list(MarkerFilter()).unwrap()
        assert [m.title for m in page.items] == [
            "Bryant Park",
            "Metropolitan Museum of Art",
            "Central Park",
            "Statue of Liberty",
        ]
        assert {m.created_by_display_name for m in page.items} == {"Demo User"}
        assert page.total_count == 4

    def test_category_and_search_combine(self, service, city):
        page = service.list(MarkerFilter(category="PARK", search="bryant")).unwrap()
        assert [m.id for m in page.items] == [city["bryant"].id]

    def test_box_is_pushed_down_and_reapplied(self, service, city):
        flt = MarkerFilter(min_lat=40.75, max_lat=40.80, min_lng=-74.0, max_lng=-73.9)
        page = service.list(flt).unwrap()
        assert {m.id for m in page.items} == {
            city["central"].id,
            city["met"].id,
            city["bryant"].id,
        }

    def test_partial_box_is_ignored(self, service, city):
        page = service.list(MarkerFilter(min_lat=40.75, max_lat=40.80)).unwrap()
        assert page.total_count == 4

    def test_paging_is_clamped(self, service, city):
        page = service.list(MarkerFilter(page=0, page_size=10_000)).unwrap()
        assert page.page == 1
        assert page.page_size == 50

        second = service.list(MarkerFilter(page=2, page_size=3)).unwrap()
        assert [m.id for m in second.items] == [city["liberty"].id]
        assert second.total_pages == 2

    def test_storage_paging_matches_in_memory_paging(self, service, db):
        now = utcnow()
        markers = [
            MarkerFactory(category="Park", created_at=now - timedelta(hours=i // 3))
            for i in range(7)
        ]
        expected = [
            m.id for m in sorted(markers, key=lambda m: (-m.created_at.timestamp(), m.id))
        ]

        def _walk(**filters) -> list[str]:
            ids = []
            for page in (1, 2, 3):
                result = service.list(MarkerFilter(page=page, page_size=3, **filters)).unwrap()
                assert result.total_count == 7 and result.total_pages == 3
                ids.extend(m.id for m in result.items)
            return ids

        assert _walk() == expected
        assert _walk(category="park") == expected

    def test_empty_store(self, service, db):
        page = service.list(MarkerFilter()).unwrap()
        assert list(page.items) == []
        assert page.total_count == 0 and page.total_pages == 0


class TestGet:
    def test_found(self, service, city):
        out = service.get(city["met"].id).unwrap()
        assert out.title == "Metropolitan Museum of Art"
        assert out.created_by_id == city["met"].created_by_id

    def test_missing_is_404(self, service, db):
        result = service.get("nope")
        assert result.status_code == 404
        assert result.error == "Marker with ID nope not found"


class TestNearby:
    def test_orders_by_distance_with_metres(self, service, city):
        hits = service.nearby(NearbyIn(latitude=40.7812, longitude=-73.9665, radius_km=5)).unwrap()
        assert [h.marker.id for h in hits][:2] == [city["central"].id, city["met"].id]
        assert all(h.distance_m <= 5_000 for h in hits)
        assert city["liberty"].id not in {h.marker.id for h in hits}

    @pytest.mark.parametrize(
        ("dto", "message"),
        [
            (NearbyIn(latitude=40, longitude=-74, radius_km=0), "Radius must be greater than 0"),
            (NearbyIn(latitude=91, longitude=-74, radius_km=1), "Latitude must be between -90 and 90"),
            (
                NearbyIn(latitude=40, longitude=181, radius_km=1),
                "Longitude must be between -180 and 180",
            ),
        ],
    )
    def test_bad_input_is_400(self, service, db, dto, message):
        result = service.nearby(dto)
        assert result.status_code == 400
        assert result.error == message

    def test_circle_over_antimeridian_scans_everything(self, service, db):
        east = MarkerFactory(latitude=0.0, longitude=179.99)
        west = MarkerFactory(latitude=0.0, longitude=-179.99)
        MarkerFactory(latitude=10.0, longitude=10.0)
        hits = service.nearby(NearbyIn(latitude=0.0, longitude=179.999, radius_km=5)).unwrap()
        assert {h.marker.id for h in hits} == {east.id, west.id}


class TestCanModify:
    def test_owner_admin_and_stranger(self, service, city):
        marker = city["central"]
        owner = Principal.of(marker.created_by_id, roles=["User"])
        admin = Principal.of("someone-else", roles=["Admin"])
        stranger = Principal.of("someone-else", roles=["User"])
        assert service.can_modify(marker.id, owner).unwrap() is True
        assert service.can_modify(marker.id, admin).unwrap() is True
        assert service.can_modify(marker.id, stranger).unwrap() is False

    def test_missing_marker_is_404(self, service, db):
        assert service.can_modify("nope", Principal.of("x")).status_code == 404
