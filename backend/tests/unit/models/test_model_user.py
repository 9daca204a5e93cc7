"""Tests for the User and Marker models."""

from __future__ import annotations

import pytest
from pointatlas.models.marker import Marker
from pointatlas.models.user import User
from sqlalchemy.exc import IntegrityError
from tests.factories.user import UserFactory


class TestUser:
    def test_password_hashing(self, session):
        u = User(email="Test@Example.com", display_name="Tester")
        u.password = "Secret123!"
        session.add(u)
        session.commit()
        assert u.verify_password("Secret123!") is True
        assert u.verify_password("wrong") is False

    def test_password_is_write_only(self):
        u = User(email="a@example.com", display_name="A")
        u.password = "x"
        with pytest.raises(AttributeError):
            _ = u.password

    def test_email_normalized_and_unique(self, session):
        u1 = User(email="Alice@Example.com", display_name="Alice")
        u1.password = "pw"
        session.add(u1)
        session.commit()
        assert u1.email == "alice@example.com"

        u2 = User(email="alice@example.com", display_name="Alice 2")
        u2.password = "pw"
        session.add(u2)
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_basic_validations(self):
        with pytest.raises(ValueError):
            User(email="", display_name="x")
        with pytest.raises(ValueError):
            User(email="not-an-email", display_name="x")
        with pytest.raises(ValueError):
            User(email="ok@example.com", display_name="   ")
        with pytest.raises(ValueError):
            User(email="ok@example.com", display_name="x").password = ""


class TestMarker:
    def test_latitude_check_constraint(self, session):
        owner = UserFactory()
        session.add(
            Marker(
                title="Nowhere",
                latitude=91.0,
                longitude=0.0,
                category="Bad",
                created_by_id=owner.id,
            )
        )
        with pytest.raises(IntegrityError):
            session.flush()
        session.rollback()
