"""Pytest fixtures wiring the Flask app, a throwaway schema and factories.

Every test that touches the database gets a freshly created in-memory SQLite
schema, dropped again on teardown, so data never leaks between cases. Units
of work commit for real inside that schema.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from typing import Any

import pytest
from flask import Flask

from pointatlas.core.config import TestingConfig
from pointatlas.core.extensions import db as _db
from pointatlas.factory import create_app


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Keeps the refresh ledger on SQL and never dials Redis.
    - Disables rate limiting so auth tests can hammer ``/login``.
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    REDIS_URL = None
    REFRESH_LEDGER_BACKEND = "sql"
    RATELIMIT_ENABLED = False
    CORS_ORIGINS = "http://localhost:5173"


@pytest.fixture(scope="session")
def app() -> Flask:
    """Create a Flask application configured for testing."""
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    application = create_app(TestConfig, instance_relative_config=False)
    application.logger.setLevel("WARNING")
    return application


@pytest.fixture()
def db(app: Flask) -> Generator[Any, None, None]:
    """Create all tables for one test and drop them afterwards.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application, inside an
        active application context.
    """
    with app.app_context():
        _db.create_all()
        try:
            yield _db
        finally:
            _db.session.remove()
            _db.drop_all()


@pytest.fixture()
def session(db: Any) -> Any:
    """Return the scoped session shared by factories, units of work and views."""
    return db.session


@pytest.fixture()
def client(app: Flask, db: Any) -> Any:
    """Return a Flask test client that sees the per-test schema."""
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture()
def freeze_time() -> Callable[[str | None], Any]:
    """Factory returning :func:`freezegun.freeze_time`.

    Examples
    --------
    >>> def test_with_frozen_time(freeze_time):
    ...     with freeze_time("2025-01-01"):
    ...         ...
    """
    from freezegun import freeze_time as _freeze_time

    def _factory(target: str | None = None) -> Any:
        return _freeze_time(target or "2025-01-01T12:00:00Z")

    return _factory


# -- Hook up Factory Boy to the per-test session -------------------------------
@pytest.fixture(autouse=True)
def _factories_session(request):
    """Wire Factory Boy's session helper when the test uses the database."""
    from tests.factories import SQLAlchemySession

    if "db" not in request.fixturenames:
        SQLAlchemySession.set(None)
        yield
        return
    SQLAlchemySession.set(request.getfixturevalue("session"))
    yield
    SQLAlchemySession.set(None)
