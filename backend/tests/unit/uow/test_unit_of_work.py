# tests/unit/uow/test_unit_of_work.py
from __future__ import annotations

import pytest
from pointatlas.models.user import User
from pointatlas.uow import SQLAlchemyReadOnlyUnitOfWork as ROuow
from pointatlas.uow import SQLAlchemyUnitOfWork as RWuow
from tests.factories.user import UserFactory


def _new_user(email: str = "uow@example.com") -> User:
    user = User(email=email, display_name="UoW")
    user.password = "Passw0rd!"
    return user


class TestSQLAlchemyUnitOfWork:
    def test_commits_on_clean_exit(self, session):
        with RWuow() as uow:
            uow.users.add(_new_user())
        session.rollback()  # nothing pending; committed data survives
        assert session.query(User).filter_by(email="uow@example.com").count() == 1

    def test_rolls_back_on_error(self, session):
        with pytest.raises(RuntimeError), RWuow() as uow:
            uow.users.add(_new_user())
            raise RuntimeError("boom")
        assert session.query(User).filter_by(email="uow@example.com").count() == 0

    def test_repositories_share_the_session(self, session):
        with RWuow() as uow:
            assert uow.users.session is uow.session
            assert uow.markers.session is uow.session
            assert uow.refresh_tokens.session is uow.session


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_allows_reads(self, session):
        UserFactory(email="reader@example.com")
        with ROuow() as uow:
            assert uow.users.get_by_email("reader@example.com") is not None

    def test_blocks_orm_flush_writes(self, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            uow.session.add(_new_user())
            uow.session.flush()
        session.rollback()

    def test_disallows_commit(self, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_joins_an_outer_transaction_without_rolling_it_back(self, session):
        user = UserFactory(email="pending@example.com")  # flushed, not committed
        with ROuow() as uow:
            assert uow.users.get(user.id) is not None
        # The caller's pending work is still there
        assert session.query(User).filter_by(email="pending@example.com").count() == 1

    def test_guard_is_removed_on_exit(self, session):
        with ROuow():
            pass
        session.add(_new_user("after@example.com"))
        session.flush()
