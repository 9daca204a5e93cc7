"""Seed pipeline and the ``flask seed`` command group."""

from __future__ import annotations

from pointatlas.models.marker import Marker
from pointatlas.models.user import User
from pointatlas.seeds import seed_data


def test_run_all_creates_accounts_and_markers(db):
    summary = seed_data.run_all(db)

    assert summary["roles"]["created"] == 2
    assert summary["users"]["created"] == 2
    assert summary["markers"]["created"] == len(seed_data.MARKER_FIXTURES)

    admin = db.session.query(User).filter_by(email="admin@pointatlas.com").one()
    assert admin.role_names == frozenset({"Admin"})
    assert admin.verify_password("Admin@123456")
    demo = db.session.query(User).filter_by(email="demo@pointatlas.com").one()
    assert demo.role_names == frozenset({"User"})


def test_run_all_is_idempotent(db):
    seed_data.run_all(db)
    summary = seed_data.run_all(db)

    assert summary["users"] == {"created": 0, "existing": 2}
    assert summary["markers"]["created"] == 0
    assert db.session.query(Marker).count() == len(seed_data.MARKER_FIXTURES)


def test_markers_are_skipped_when_any_exist(db):
    seed_data.seed_roles_and_users(db)
    owner = db.session.query(User).filter_by(email="demo@pointatlas.com").one()
    db.session.add(
        Marker(title="Mine", latitude=1.0, longitude=1.0, category="Park", created_by_id=owner.id)
    )
    db.session.commit()

    summary = seed_data.seed_markers(db)
    assert summary["markers"] == {"created": 0, "existing": 1}


def test_cli_run_and_fresh(app, db):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["seed", "run"])
    assert result.exit_code == 0, result.output
    assert "Seed summary:" in result.output

    result = runner.invoke(args=["seed", "fresh", "--yes"])
    assert result.exit_code == 0, result.output
    assert db.session.query(Marker).count() == len(seed_data.MARKER_FIXTURES)
