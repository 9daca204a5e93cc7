"""
pointatlas.services._shared.ports
=================================

Collection of *ports* (hexagonal interfaces) that the service layer depends
on for credentials and tokens.

Modules
-------
- :mod:`token_provider`:
    Defines :class:`~.TokenProvider`, abstraction for signing and verifying
    access tokens and minting opaque refresh tokens.

- :mod:`refresh_token_ledger`:
    Defines :class:`~.RefreshTokenLedger`, :class:`~.RotationResult` and
    :class:`~.RefreshTokenRecord`, the stateful side of refresh tokens.

- :mod:`credential_store`:
    Defines :class:`~.CredentialStore` and :class:`~.UserRecord`, account
    lookup, password verification and role membership.

Concrete adapters (SQL, Redis, Flask-JWT-Extended) live under
``pointatlas.infra``. The in-memory implementations exported here are test
doubles.
"""

from __future__ import annotations

from .credential_store import CredentialStore, InMemoryCredentialStore, UserRecord
from .refresh_token_ledger import (
    InMemoryRefreshTokenLedger,
    RefreshTokenLedger,
    RefreshTokenRecord,
    RotationResult,
)
from .token_provider import INVALID_ACCESS_TOKEN, StubTokenProvider, TokenProvider

__all__ = [
    "CredentialStore",
    "InMemoryCredentialStore",
    "UserRecord",
    "RefreshTokenLedger",
    "RefreshTokenRecord",
    "RotationResult",
    "InMemoryRefreshTokenLedger",
    "TokenProvider",
    "StubTokenProvider",
    "INVALID_ACCESS_TOKEN",
]
