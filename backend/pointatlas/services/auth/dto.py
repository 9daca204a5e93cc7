# pointatlas/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for account registration.

    :param email: Login email.
    :type email: str
    :param password: Raw password (checked against the password policy).
    :type password: str
    :param display_name: Public name shown next to the user's markers.
    :type display_name: str
    """

    email: str
    password: str
    display_name: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Opaque refresh token issued earlier.
    :type refresh_token: str
    """

    refresh_token: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class UserOut:
    """
    Public view of an account.

    :param roles: Role names, sorted.
    :type roles: list[str]
    """

    id: str
    email: str
    display_name: str
    roles: list[str]


@dataclass(frozen=True, slots=True)
class AuthOut:
    """
    Output DTO for register, login and refresh.

    :param access_token: Signed access JWT.
    :type access_token: str
    :param refresh_token: Opaque refresh token.
    :type refresh_token: str
    :param user: The authenticated user.
    :type user: UserOut
    """

    access_token: str
    refresh_token: str
    user: UserOut


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission configuration.

    Access token lifetime is owned by the token provider; only the refresh
    lifetime is needed here to stamp ledger records.

    :param refresh_expires: Refresh token lifetime.
    :type refresh_expires: timedelta
    """

    refresh_expires: timedelta = timedelta(days=7)
