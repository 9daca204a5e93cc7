"""Idempotent database seed helpers for local development environments."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any, TypeVar, cast

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from pointatlas.models.marker import Marker
from pointatlas.models.user import Role, User
from pointatlas.services._shared.policies.common import ADMIN_ROLE, KNOWN_ROLES

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

USER_FIXTURES: list[dict[str, str]] = [
    {
        "key": "admin",
        "email": "admin@pointatlas.com",
        "display_name": "Administrator",
        "password": "Admin@123456",
        "role": ADMIN_ROLE,
    },
    {
        "key": "demo",
        "email": "demo@pointatlas.com",
        "display_name": "Demo User",
        "password": "Demo@123456",
        "role": "User",
    },
]

# New York City sample set; ``age_days`` back-dates created_at/updated_at.
MARKER_FIXTURES: list[dict[str, Any]] = [
    {
        "title": "Statue of Liberty",
        "description": "Neoclassical copper statue on Liberty Island in New York Harbor.",
        "category": "Landmark",
        "latitude": 40.6892,
        "longitude": -74.0445,
        "owner": "admin",
        "age_days": 30,
        "properties": {"visitor_info": "Ferry required", "entry_fee": "$24", "opened": "1886"},
    },
    {
        "title": "Central Park",
        "description": "Large urban park in Manhattan and one of the most visited in the country.",
        "category": "Park",
        "latitude": 40.7829,
        "longitude": -73.9654,
        "owner": "demo",
        "age_days": 25,
        "properties": {"size": "843 acres", "opened": "1857"},
    },
    {
        "title": "Metropolitan Museum of Art",
        "description": "The Met: the largest art museum in the Americas.",
        "category": "Museum",
        "latitude": 40.7794,
        "longitude": -73.9632,
        "owner": "admin",
        "age_days": 20,
        "properties": {"entry_fee": "Pay what you wish", "founded": "1870"},
    },
    {
        "title": "Katz's Delicatessen",
        "description": "Lower East Side deli opened in 1888, known for pastrami on rye.",
        "category": "Restaurant",
        "latitude": 40.7223,
        "longitude": -73.9873,
        "owner": "demo",
        "age_days": 15,
        "properties": {"cuisine": "Jewish Deli", "price_range": "$$"},
    },
    {
        "title": "Times Square",
        "description": "Midtown intersection famous for its lights and Broadway theaters.",
        "category": "Landmark",
        "latitude": 40.7580,
        "longitude": -73.9855,
        "owner": "admin",
        "age_days": 12,
        "properties": {"nickname": "The Crossroads of the World"},
    },
    {
        "title": "Brooklyn Bridge",
        "description": "Suspension bridge over the East River between Manhattan and Brooklyn.",
        "category": "Landmark",
        "latitude": 40.7061,
        "longitude": -73.9969,
        "owner": "demo",
        "age_days": 10,
        "properties": {"completed": "1883", "architect": "John Roebling"},
    },
    {
        "title": "Strand Bookstore",
        "description": "Independent bookstore selling new, used and rare books since 1927.",
        "category": "Shop",
        "latitude": 40.7336,
        "longitude": -73.9906,
        "owner": "demo",
        "age_days": 8,
        "properties": {"founded": "1927"},
    },
    {
        "title": "High Line Park",
        "description": "Elevated park built on a former freight rail line.",
        "category": "Park",
        "latitude": 40.7480,
        "longitude": -74.0048,
        "owner": "admin",
        "age_days": 6,
        "properties": {"length": "1.45 miles", "opened": "2009"},
    },
    {
        "title": "Joe's Pizza",
        "description": "Greenwich Village pizzeria serving New York slices since 1975.",
        "category": "Restaurant",
        "latitude": 40.7304,
        "longitude": -74.0014,
        "owner": "demo",
        "age_days": 4,
        "properties": {"cuisine": "Pizza", "payment": "Cash only"},
    },
    {
        "title": "9/11 Memorial & Museum",
        "description": "Memorial and museum at the World Trade Center site.",
        "category": "Museum",
        "latitude": 40.7115,
        "longitude": -74.0134,
        "owner": "admin",
        "age_days": 2,
        "properties": {"pools": "Two reflecting pools"},
    },
    {
        "title": "Chelsea Market",
        "description": "Food hall and market in a former Nabisco factory.",
        "category": "Shop",
        "latitude": 40.7425,
        "longitude": -74.0061,
        "owner": "demo",
        "age_days": 1,
        "properties": {"type": "Food hall & market", "vendors": "35+"},
    },
    {
        "title": "Bryant Park",
        "description": "Midtown park with free events, movie nights and winter skating.",
        "category": "Park",
        "latitude": 40.7536,
        "longitude": -73.9832,
        "owner": "admin",
        "age_days": 0,
        "properties": {"size": "9.6 acres"},
    },
]


def _session(database: SQLAlchemy) -> Session:
    """Return the current SQLAlchemy session."""
    return cast(Session, database.session)


def _touch(summary: dict[str, dict[str, int]], table: str, created: bool) -> None:
    """Update summary counters for the given table."""
    entry = summary.setdefault(table, {"created": 0, "existing": 0})
    if created:
        entry["created"] += 1
    else:
        entry["existing"] += 1


def _get_or_create(
    session: Session,
    model: type[T],
    *,
    defaults: dict[str, Any] | None = None,
    **filters: Any,
) -> tuple[T, bool]:
    """Fetch ``model`` by ``filters`` or create it using ``defaults``."""
    instance = session.execute(select(model).filter_by(**filters)).scalar_one_or_none()
    if instance is not None:
        return instance, False
    params = dict(defaults or {})
    params.update(filters)
    instance = cast(T, model(**params))
    session.add(instance)
    return instance, True


def seed_roles_and_users(
    database: SQLAlchemy, *, verbose: bool = False
) -> dict[str, dict[str, int]]:
    """Create the known roles plus the admin and demo accounts."""
    if verbose:
        LOGGER.info("Seeding roles and users...")
    session = _session(database)
    summary: dict[str, dict[str, int]] = {}
    roles: dict[str, Role] = {}

    for name in KNOWN_ROLES:
        role, created = _get_or_create(session, Role, name=name)
        roles[name] = role
        _touch(summary, "roles", created)
    session.flush()

    for fixture in USER_FIXTURES:
        email = fixture["email"].strip().lower()
        user = session.execute(select(User).filter_by(email=email)).scalar_one_or_none()
        created = user is None
        if user is None:
            user = User(email=email, display_name=fixture["display_name"])
            user.password = fixture["password"]
            session.add(user)
        if roles[fixture["role"]] not in user.roles:
            user.roles.append(roles[fixture["role"]])
        session.flush()
        _touch(summary, "users", created)

    session.commit()
    return summary


def seed_markers(
    database: SQLAlchemy, *, verbose: bool = False, now: datetime | None = None
) -> dict[str, dict[str, int]]:
    """Create the sample markers, but only into an empty ``markers`` table."""
    session = _session(database)
    summary: dict[str, dict[str, int]] = {}
    existing = int(session.execute(select(func.count()).select_from(Marker)).scalar_one())
    if existing:
        if verbose:
            LOGGER.info("Markers already present; skipping", extra={"count": existing})
        summary["markers"] = {"created": 0, "existing": existing}
        return summary

    if verbose:
        LOGGER.info("Seeding markers...")
    owners: dict[str, User] = {}
    for fixture in USER_FIXTURES:
        owner = session.execute(
            select(User).filter_by(email=fixture["email"])
        ).scalar_one_or_none()
        if owner is None:
            raise RuntimeError(f"Seed user {fixture['email']} is missing; seed users first")
        owners[fixture["key"]] = owner

    now = now or datetime.now(UTC)
    for fixture in MARKER_FIXTURES:
        stamp = now - timedelta(days=int(fixture["age_days"]))
        session.add(
            Marker(
                title=fixture["title"],
                description=fixture["description"],
                category=fixture["category"],
                latitude=fixture["latitude"],
                longitude=fixture["longitude"],
                properties=dict(fixture["properties"]),
                created_by_id=owners[fixture["owner"]].id,
                created_at=stamp,
                updated_at=stamp,
            )
        )
        _touch(summary, "markers", True)

    session.commit()
    return summary


def run_all(database: SQLAlchemy, *, verbose: bool = False) -> dict[str, dict[str, int]]:
    """Run all seeders in foreign-key order."""
    if verbose:
        LOGGER.info("Running full seed pipeline...")
    combined: dict[str, dict[str, int]] = {}
    for seeder in (seed_roles_and_users, seed_markers):
        result = seeder(database, verbose=verbose)
        for table, counters in result.items():
            entry = combined.setdefault(table, {"created": 0, "existing": 0})
            entry["created"] += counters.get("created", 0)
            entry["existing"] += counters.get("existing", 0)
    return combined


__all__ = ["seed_roles_and_users", "seed_markers", "run_all"]
