from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

from werkzeug.security import check_password_hash, generate_password_hash

from pointatlas.services._shared.policies.password import password_problems
from pointatlas.services._shared.result import Result


@dataclass(frozen=True, slots=True)
class UserRecord:
    """
    Read-model for an account as seen by the authentication core.

    :ivar id: User id.
    :ivar email: Normalized (lowercase) login email.
    :ivar display_name: Public name.
    :ivar roles: Role names the user belongs to.
    :ivar created_at: Registration instant (UTC).
    """

    id: str
    email: str
    display_name: str
    roles: frozenset[str] = field(default_factory=frozenset)
    created_at: datetime | None = None


class CredentialStore(Protocol):
    """Port over user accounts, password verification and role membership."""

    def find_by_email(self, email: str) -> UserRecord | None: ...

    def find_by_id(self, user_id: str) -> UserRecord | None: ...

    def verify_password(self, user_id: str, password: str) -> bool: ...

    def create_user(
        self, *, email: str, password: str, display_name: str, roles: Iterable[str] = ()
    ) -> Result[UserRecord]:
        """
        Create an account already holding ``roles``, in one atomic step.

        Fails with status 400 and one message per violated password rule, or
        with 409 when the email is already taken.
        """

    def add_to_role(self, user_id: str, role: str) -> None: ...

    def roles_of(self, user_id: str) -> frozenset[str]: ...


@dataclass(slots=True)
class _Account:
    record: UserRecord
    password_hash: str


class InMemoryCredentialStore(CredentialStore):
    """Dictionary-backed credential store used as a test double."""

    def __init__(self) -> None:
        self._by_id: dict[str, _Account] = {}
        self._lock = threading.Lock()

    def find_by_email(self, email: str) -> UserRecord | None:
        key = email.strip().lower()
        with self._lock:
            for account in self._by_id.values():
                if account.record.email == key:
                    return account.record
        return None

    def find_by_id(self, user_id: str) -> UserRecord | None:
        with self._lock:
            account = self._by_id.get(str(user_id))
        return account.record if account else None

    def verify_password(self, user_id: str, password: str) -> bool:
        with self._lock:
            account = self._by_id.get(str(user_id))
        return bool(account and check_password_hash(account.password_hash, password))

    def create_user(
        self, *, email: str, password: str, display_name: str, roles: Iterable[str] = ()
    ) -> Result[UserRecord]:
        problems = password_problems(password)
        if problems:
            return Result.failure(", ".join(problems))
        if self.find_by_email(email) is not None:
            return Result.conflict("User with this email already exists")
        record = UserRecord(
            id=str(uuid4()),
            email=email.strip().lower(),
            display_name=display_name.strip(),
            roles=frozenset(roles),
            created_at=datetime.now(UTC),
        )
        with self._lock:
            self._by_id[record.id] = _Account(record, generate_password_hash(password))
        return Result.success(record)

    def add_to_role(self, user_id: str, role: str) -> None:
        with self._lock:
            account = self._by_id[str(user_id)]
            account.record = replace(account.record, roles=account.record.roles | {role})

    def roles_of(self, user_id: str) -> frozenset[str]:
        record = self.find_by_id(user_id)
        return record.roles if record else frozenset()

    def remove(self, user_id: str) -> None:
        """Drop an account, e.g. to simulate a user deleted mid-session."""
        with self._lock:
            self._by_id.pop(str(user_id), None)
