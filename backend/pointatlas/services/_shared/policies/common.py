from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pointatlas.services._shared.principal import Principal

ADMIN_ROLE = "Admin"
DEFAULT_ROLE = "User"
KNOWN_ROLES = (ADMIN_ROLE, DEFAULT_ROLE)


def is_owner(*, actor_id, owner_id) -> bool:
    """Return True if the actor owns the resource."""
    return str(actor_id) == str(owner_id)


def can_modify(owner_id: str, principal: Principal) -> bool:
    """
    Decide whether ``principal`` may update or delete a resource.

    Admins may modify anything; everyone else only what they own. Existence
    is the caller's concern: check it first so a missing resource reports 404
    rather than 403.

    :param owner_id: Id of the user who created the resource.
    :param principal: Authenticated caller.
    :returns: ``True`` when the change is allowed.
    """
    return ADMIN_ROLE in principal.roles or is_owner(actor_id=principal.id, owner_id=owner_id)
