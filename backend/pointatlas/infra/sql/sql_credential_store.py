# comments in English; reST docstrings
from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.exc import IntegrityError

from pointatlas.models.user import User
from pointatlas.services._shared.errors import violates
from pointatlas.services._shared.policies.password import password_problems
from pointatlas.services._shared.ports import CredentialStore, UserRecord
from pointatlas.services._shared.result import Result
from pointatlas.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "User with this email already exists"


def _to_record(user: User) -> UserRecord:
    return UserRecord(
        id=user.id,
        email=user.email,
        display_name=user.display_name,
        roles=user.role_names,
        created_at=user.created_at,
    )


class SqlCredentialStore(CredentialStore):
    """
    Credential store over the ``users`` / ``roles`` tables.

    Lookups run in read-only units of work; account creation and role
    membership changes commit immediately.
    """

    def find_by_email(self, email: str) -> UserRecord | None:
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            user = uow.users.get_by_email(email)
            return _to_record(user) if user else None

    def find_by_id(self, user_id: str) -> UserRecord | None:
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            user = uow.users.get(str(user_id))
            return _to_record(user) if user else None

    def verify_password(self, user_id: str, password: str) -> bool:
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            user = uow.users.get(str(user_id))
            return bool(user and user.verify_password(password))

    def create_user(
        self, *, email: str, password: str, display_name: str, roles: Iterable[str] = ()
    ) -> Result[UserRecord]:
        """
        Persist a new account and its initial roles after checking the password
        policy. The user row and its memberships commit together or not at all.

        :returns: The created record, a 400 listing every broken password
            rule, or a 409 when the email is taken (including a lost race on
            the unique constraint).
        """
        problems = password_problems(password)
        if problems:
            return Result.failure(", ".join(problems))

        try:
            with SQLAlchemyUnitOfWork() as uow:
                if uow.users.exists_by_email(email):
                    return Result.conflict(DUPLICATE_EMAIL_MESSAGE)
                try:
                    user = User(email=email, display_name=display_name)
                    user.password = password
                except ValueError as exc:
                    return Result.failure(str(exc))
                uow.users.add(user)
                for role in roles:
                    uow.users.add_to_role(user, role)
                record = _to_record(user)
        except IntegrityError as exc:
            if violates(exc, "uq_users_email"):
                logger.info("Concurrent registration lost the email race")
                return Result.conflict(DUPLICATE_EMAIL_MESSAGE)
            raise
        return Result.success(record)

    def add_to_role(self, user_id: str, role: str) -> None:
        with SQLAlchemyUnitOfWork() as uow:
            user = uow.users.get(str(user_id))
            if user is None:
                raise LookupError(f"User {user_id} not found")
            uow.users.add_to_role(user, role)

    def roles_of(self, user_id: str) -> frozenset[str]:
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            user = uow.users.get(str(user_id))
            return user.role_names if user else frozenset()
