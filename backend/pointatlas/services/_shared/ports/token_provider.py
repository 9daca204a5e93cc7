from __future__ import annotations

import secrets
from typing import Protocol

from pointatlas.services._shared.principal import Principal
from pointatlas.services._shared.result import Result

INVALID_ACCESS_TOKEN = "Invalid or expired access token"


class TokenProvider(Protocol):
    """Port for minting and verifying tokens.

    Access tokens are signed and self-contained; refresh tokens are opaque
    random strings whose state lives in the refresh token ledger.
    """

    def issue_access_token(self, principal: Principal) -> str: ...

    def issue_refresh_token(self) -> str: ...

    def validate_access_token(self, token: str) -> Result[Principal]: ...


class StubTokenProvider(TokenProvider):
    """Deterministic token provider used in unit tests.

    Issued access tokens are remembered in memory; ``revoke_access`` lets a
    test simulate an expired or tampered token.
    """

    def __init__(self) -> None:
        self._seq = 0
        self._issued: dict[str, Principal] = {}

    def issue_access_token(self, principal: Principal) -> str:
        self._seq += 1
        token = f"access.{principal.id}.{self._seq}"
        self._issued[token] = principal
        return token

    def issue_refresh_token(self) -> str:
        self._seq += 1
        return f"refresh.{self._seq}.{secrets.token_hex(8)}"

    def validate_access_token(self, token: str) -> Result[Principal]:
        principal = self._issued.get(token)
        if principal is None:
            return Result.unauthorized(INVALID_ACCESS_TOKEN)
        return Result.success(principal)

    def revoke_access(self, token: str) -> None:
        self._issued.pop(token, None)
