from pointatlas.models.marker import Marker
from pointatlas.models.refresh_token import RefreshToken
from pointatlas.models.user import Role, User, user_roles

__all__ = [
    "Marker",
    "RefreshToken",
    "Role",
    "User",
    "user_roles",
]
