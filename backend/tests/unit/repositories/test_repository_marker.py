# tests/unit/repositories/test_repository_marker.py
from __future__ import annotations

from datetime import timedelta

import pytest
from pointatlas.models.base import utcnow
from pointatlas.repositories.marker import MarkerRepository
from tests.factories.marker import MarkerFactory


@pytest.fixture()
def repo(session) -> MarkerRepository:
    return MarkerRepository(session=session)


def test_list_all_newest_first(repo):
    now = utcnow()
    old = MarkerFactory(created_at=now - timedelta(days=2))
    new = MarkerFactory(created_at=now)
    assert [m.id for m in repo.list_all()] == [new.id, old.id]


def test_list_in_bounds_is_inclusive(repo):
    edge = MarkerFactory(latitude=10.0, longitude=20.0)
    inside = MarkerFactory(latitude=5.0, longitude=15.0)
    MarkerFactory(latitude=10.5, longitude=15.0)
    found = repo.list_in_bounds(min_lat=0, max_lat=10, min_lng=10, max_lng=20)
    assert {m.id for m in found} == {edge.id, inside.id}


def test_list_near_without_box_returns_everything(repo):
    MarkerFactory.create_batch(3)
    assert len(repo.list_near(box=None)) == 3
    assert repo.count() == 3


def test_reads_eager_load_owner(repo):
    marker = MarkerFactory()
    fetched = repo.get(marker.id)
    assert fetched.created_by.display_name == marker.created_by.display_name


def test_assign_updates_rejects_unknown_fields(repo):
    marker = MarkerFactory()
    with pytest.raises(ValueError):
        repo.assign_updates(marker, {"created_by_id": "someone"})


def test_page_newest_first_counts_all_and_slices(repo):
    now = utcnow()
    rows = [
        MarkerFactory(latitude=1.0, longitude=1.0, created_at=now - timedelta(minutes=i))
        for i in range(5)
    ]
    MarkerFactory(latitude=50.0, longitude=50.0, created_at=now + timedelta(days=1))

    page, total = repo.page_newest_first(box=(0.0, 2.0, 0.0, 2.0), offset=2, limit=2)
    assert total == 5
    assert [m.id for m in page] == [rows[2].id, rows[3].id]

    _, everything = repo.page_newest_first(box=None, offset=0, limit=10)
    assert everything == 6
