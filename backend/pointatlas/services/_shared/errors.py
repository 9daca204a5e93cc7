"""
Persistence error helpers for adapters that turn database faults into
``Result`` failures.

Kept framework-agnostic: no Flask or HTTP imports.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.

    Notes
    -----
    PostgreSQL reports the constraint name; SQLite reports the column
    (``users.email``), so the table/column spelling is accepted too.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    if constraint_name.lower() in message:
        return True
    prefix, _, rest = constraint_name.lower().partition("_")
    if prefix != "uq":
        return False
    # uq_<table>_<column> -> "<table>.<column>"; try every split point
    return any(
        f"{rest[:i]}.{rest[i + 1:]}" in message for i, ch in enumerate(rest) if ch == "_"
    )
