from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from pointatlas.services._shared.policies.common import ADMIN_ROLE


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller, derived from a verified access token per request.

    Never persisted. Passed explicitly into every operation that needs to
    know who is acting.

    :param id: User id (JWT ``sub``).
    :param email: Login email.
    :param display_name: Name shown in the client.
    :param roles: Role names carried by the token.
    """

    id: str
    email: str = ""
    display_name: str = ""
    roles: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def of(
        cls, id: str, *, email: str = "", display_name: str = "", roles: Iterable[str] = ()
    ) -> Principal:
        return cls(id=str(id), email=email, display_name=display_name, roles=frozenset(roles))

    def has_role(self, role: str) -> bool:
        return role in self.roles

    @property
    def is_admin(self) -> bool:
        return ADMIN_ROLE in self.roles
