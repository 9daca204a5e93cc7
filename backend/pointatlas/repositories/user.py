"""User and role repositories."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from pointatlas.models.user import Role, User
from pointatlas.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Handles lookup and role membership. It never issues tokens.
    """

    model = User

    def _sortable_fields(self):
        return {"email": User.email, "created_at": User.created_at}

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email.lower().strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email.lower().strip())
        return bool(self.session.execute(stmt).first())

    def display_name_of(self, user_id: str) -> str | None:
        """Return only the display name of ``user_id`` (``None`` if absent)."""
        stmt = select(User.display_name).where(User.id == user_id)
        return cast(str | None, self.session.execute(stmt).scalar_one_or_none())

    # ---------------------------- Roles ----------------------------

    def get_role(self, name: str) -> Role | None:
        stmt = select(Role).where(Role.name == name)
        return cast(Role | None, self.session.execute(stmt).scalars().first())

    def ensure_role(self, name: str) -> Role:
        """Return the role called ``name``, creating it when missing."""
        role = self.get_role(name)
        if role is None:
            role = Role(name=name)
            self.session.add(role)
            self.flush()
        return role

    def add_to_role(self, user: User, role_name: str) -> None:
        """Add ``user`` to ``role_name``; a no-op if already a member."""
        role = self.ensure_role(role_name)
        if role not in user.roles:
            user.roles.append(role)
            self.flush()
