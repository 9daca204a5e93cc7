# pointatlas/services/auth/service.py
from __future__ import annotations

import logging

from pointatlas.services._shared.base import BaseService, Clock
from pointatlas.services._shared.policies.common import DEFAULT_ROLE
from pointatlas.services._shared.ports import (
    CredentialStore,
    RefreshTokenLedger,
    RefreshTokenRecord,
    RotationResult,
    TokenProvider,
    UserRecord,
)
from pointatlas.services._shared.principal import Principal
from pointatlas.services._shared.result import CONFLICT, Result
from pointatlas.services.auth.dto import (
    AuthOut,
    AuthTokenConfig,
    LoginIn,
    RefreshIn,
    RegisterIn,
    UserOut,
)

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "User with this email already exists"
INVALID_CREDENTIALS = "Invalid email or password"
INVALID_REFRESH_TOKEN = "Invalid or expired refresh token"
USER_NOT_FOUND = "User not found"


class SessionManager(BaseService):
    """
    Authentication lifecycle service (register / login / refresh / logout).

    Access tokens come from a pluggable :class:`TokenProvider`; refresh
    tokens are opaque strings whose state lives in the
    :class:`RefreshTokenLedger`. Accounts are resolved through the
    :class:`CredentialStore`.

    Refresh chain states: ``active -> rotated (revoked) -> unusable``. Every
    refresh consumes the presented token; replaying it fails.
    """

    def __init__(
        self,
        *,
        credentials: CredentialStore,
        tokens: TokenProvider,
        ledger: RefreshTokenLedger,
        token_cfg: AuthTokenConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param credentials: Account lookup, password check and role membership.
        :param tokens: Adapter for issuing and validating tokens.
        :param ledger: Refresh token state (atomic rotation).
        :param token_cfg: Refresh token lifetime.
        :param clock: Source of "now"; defaults to UTC wall clock.
        """
        super().__init__(clock=clock)
        self.credentials = credentials
        self.tokens = tokens
        self.ledger = ledger
        self.cfg = token_cfg or AuthTokenConfig()

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> Result[AuthOut]:
        """
        Create an account with the default role and sign it in.

        :returns: The new session, 409 for a taken email, or 400 carrying the
            store's validation messages.
        """
        if self.credentials.find_by_email(dto.email) is not None:
            return Result.conflict(DUPLICATE_EMAIL)

        created = self.credentials.create_user(
            email=dto.email,
            password=dto.password,
            display_name=dto.display_name,
            roles=(DEFAULT_ROLE,),
        )
        if created.is_failure:
            if created.status_code == CONFLICT:
                return Result.conflict(DUPLICATE_EMAIL)
            return Result.failure(f"Failed to create user: {created.error}")

        user = created.unwrap()
        logger.info("User registered", extra={"user_id": user.id})
        return Result.success(self._issue_session(user.id))

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> Result[AuthOut]:
        """
        Authenticate credentials and issue a fresh session.

        Unknown email and wrong password produce the same failure.
        """
        user = self.credentials.find_by_email(dto.email)
        if user is None or not self.credentials.verify_password(user.id, dto.password):
            logger.info("Login rejected")
            return Result.unauthorized(INVALID_CREDENTIALS)
        return Result.success(self._issue_session(user.id))

    # ------------------------------------------------------------------ #
    # Refresh with atomic rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> Result[AuthOut]:
        """
        Rotate a refresh token and emit a new token pair.

        Absent, expired, revoked, already rotated and orphaned tokens all map
        to one 401 so callers learn nothing about the token's state.
        """
        now = self.now()
        current = self.ledger.get_active(dto.refresh_token, now=now)
        if current is None:
            return Result.unauthorized(INVALID_REFRESH_TOKEN)

        user = self.credentials.find_by_id(current.user_id)
        if user is None:
            logger.info("Refresh for a missing user", extra={"user_id": current.user_id})
            return Result.unauthorized(INVALID_REFRESH_TOKEN)

        successor = RefreshTokenRecord.new(
            token=self.tokens.issue_refresh_token(),
            user_id=user.id,
            issued_at=now,
            expires_at=now + self.cfg.refresh_expires,
        )
        outcome = self.ledger.rotate(old_token=dto.refresh_token, successor=successor, now=now)
        if outcome is not RotationResult.OK:
            # Lost a race with a concurrent rotation, or expired in between
            logger.info(
                "Refresh rotation refused: %s", outcome.name, extra={"user_id": user.id}
            )
            return Result.unauthorized(INVALID_REFRESH_TOKEN)

        access = self.tokens.issue_access_token(self._principal_of(user))
        return Result.success(
            AuthOut(access_token=access, refresh_token=successor.token, user=self._to_out(user))
        )

    # ------------------------------------------------------------------ #
    # Logout / current user
    # ------------------------------------------------------------------ #

    def logout(self, user_id: str) -> Result[None]:
        """Revoke every refresh token of ``user_id``. Never fails for lack of work."""
        self.ledger.revoke_all_for_user(str(user_id), now=self.now())
        return Result.success(None)

    def get_current_user(self, user_id: str) -> Result[UserOut]:
        user = self.credentials.find_by_id(str(user_id))
        if user is None:
            return Result.not_found(USER_NOT_FOUND)
        return Result.success(self._to_out(user))

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _issue_session(self, user_id: str) -> AuthOut:
        """
        Re-read the account (roles may just have changed), store a new
        refresh token, then hand out the pair.
        """
        user = self.credentials.find_by_id(user_id)
        if user is None:
            raise LookupError(f"User {user_id} vanished while issuing a session")

        now = self.now()
        record = self.ledger.create(
            RefreshTokenRecord.new(
                token=self.tokens.issue_refresh_token(),
                user_id=user.id,
                issued_at=now,
                expires_at=now + self.cfg.refresh_expires,
            )
        )
        access = self.tokens.issue_access_token(self._principal_of(user))
        return AuthOut(access_token=access, refresh_token=record.token, user=self._to_out(user))

    @staticmethod
    def _principal_of(user: UserRecord) -> Principal:
        return Principal.of(
            user.id, email=user.email, display_name=user.display_name, roles=user.roles
        )

    @staticmethod
    def _to_out(user: UserRecord) -> UserOut:
        return UserOut(
            id=user.id,
            email=user.email,
            display_name=user.display_name,
            roles=sorted(user.roles),
        )
