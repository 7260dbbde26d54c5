"""
Session manager: signup, login, refresh-token rotation, logout and access
token verification.

A refresh token moves through three states:
- Active: issued, not expired, not revoked
- Revoked: terminal, set on logout or when the token is rotated
- Expired: terminal, purely time based

Refresh is rotation-on-use. The presented token is revoked with a
conditional update and only the caller that actually revoked it gets a new
pair, so replaying a rotated token (or racing two refreshes with the same
token) fails with Unauthorized.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from models.base_model import utcnow
from models.user import User
from services.directory import UserDirectory
from services.exceptions import (
    AlreadyRevoked,
    Conflict,
    InvalidInput,
    NotFound,
    PersistenceFailure,
    TokenError,
    Unauthorized,
)
from services.ledger import RefreshTokenLedger
from services.settings import AuthSettings
from utils.security import (
    build_password_hasher,
    fingerprint_token,
    hash_password,
    needs_rehash,
    verify_password,
)
from utils.tokens import ACCESS, REFRESH, decode_token, sign_token
from utils.validators import normalize_email, validate_email

logger = logging.getLogger(__name__)

TOKEN_TYPE = "Bearer"
INVALID_CREDENTIALS = "Invalid email or password"
INVALID_REFRESH_TOKEN = "Invalid or expired refresh token"


def _require_strings(message: str, *values) -> None:
    for value in values:
        if not isinstance(value, str) or not value.strip():
            raise InvalidInput(message)


@dataclass(frozen=True)
class IssuedTokens:
    access_token: str
    refresh_token: str
    expires_in: int
    user: Optional[User] = None
    token_type: str = TOKEN_TYPE


@dataclass(frozen=True)
class AccessIdentity:
    user_id: str
    email: str


class SessionManager:
    def __init__(self, settings: AuthSettings, directory: UserDirectory,
                 ledger: RefreshTokenLedger, storage, clock: Callable[[], datetime] | None = None):
        self.settings = settings
        self.directory = directory
        self.ledger = ledger
        self._storage = storage
        self._clock = clock or utcnow
        self._hasher = build_password_hasher(
            settings.hash_time_cost, settings.hash_memory_cost, settings.hash_parallelism
        )
        # verified against for unknown emails so both login failures cost the same
        self._dummy_hash = hash_password("timing-equalisation-only", self._hasher)

    # ------------------------------------------------------------------
    # transaction helpers
    # ------------------------------------------------------------------
    def _commit(self):
        try:
            self._storage.save()
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"commit failed: {exc}") from exc

    def _rollback(self):
        try:
            self._storage.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback failed")

    def _in_transaction(self, fn, *args):
        """Run fn, commit on success, roll back on any error."""
        try:
            result = fn(*args)
            self._commit()
        except SQLAlchemyError as exc:
            self._rollback()
            raise PersistenceFailure(str(exc)) from exc
        except Exception:
            self._rollback()
            raise
        return result

    # ------------------------------------------------------------------
    # issuance
    # ------------------------------------------------------------------
    def _issue_pair(self, user: User) -> IssuedTokens:
        """Sign an access/refresh pair for `user` and record the refresh token as Active."""
        now = self._clock()
        access_token = sign_token(
            user.id, user.email, self.settings.secret, self.settings.access_ttl,
            token_type=ACCESS, now=now,
        )
        refresh_token = sign_token(
            user.id, user.email, self.settings.secret, self.settings.refresh_ttl,
            token_type=REFRESH, now=now,
        )
        self.ledger.store(user.id, fingerprint_token(refresh_token), now + self.settings.refresh_ttl)
        return IssuedTokens(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self.settings.access_expires_in,
            user=user,
        )

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------
    def signup(self, email: str, password: str, name: str) -> IssuedTokens:
        _require_strings("Email, password, and name are required", email, password, name)
        validate_email(email)
        email = normalize_email(email)

        def _signup():
            if self.directory.get_by_email(email) is not None:
                raise Conflict("User with this email already exists")
            pw_hash = hash_password(password, self._hasher)
            user = self.directory.create(email, pw_hash, name.strip())
            return self._issue_pair(user)

        issued = self._in_transaction(_signup)
        logger.info("Signup succeeded for user %s", issued.user.id)
        return issued

    def login(self, email: str, password: str) -> IssuedTokens:
        _require_strings("Email and password are required", email, password)
        validate_email(email)

        def _login():
            user = self.directory.get_by_email(email)
            if user is None:
                verify_password(password, self._dummy_hash, self._hasher)
                raise Unauthorized(INVALID_CREDENTIALS)
            if not verify_password(password, user.password_hash, self._hasher):
                raise Unauthorized(INVALID_CREDENTIALS)
            if needs_rehash(user.password_hash, self._hasher):
                self.directory.update_password_hash(user, hash_password(password, self._hasher))
            return self._issue_pair(user)

        try:
            issued = self._in_transaction(_login)
        except Unauthorized:
            logger.info("Login failed")
            raise
        logger.info("Login succeeded for user %s", issued.user.id)
        return issued

    def refresh(self, refresh_token: str) -> IssuedTokens:
        _require_strings("Refresh token is required", refresh_token)
        fingerprint = fingerprint_token(refresh_token)

        def _refresh():
            now = self._clock()
            try:
                record = self.ledger.lookup_by_fingerprint(fingerprint)
            except NotFound:
                raise Unauthorized(INVALID_REFRESH_TOKEN)

            if record.is_revoked():
                self._on_reuse(record.user_id)
                raise Unauthorized(INVALID_REFRESH_TOKEN)
            if record.is_expired(now):
                raise Unauthorized(INVALID_REFRESH_TOKEN)

            user = self.directory.get_by_id(record.user_id)
            if user is None:
                raise Unauthorized(INVALID_REFRESH_TOKEN)

            if not self.ledger.revoke(record, now):
                # a concurrent refresh with the same token got there first
                raise Unauthorized(INVALID_REFRESH_TOKEN)
            return self._issue_pair(user)

        try:
            issued = self._in_transaction(_refresh)
        except _ReuseDetected as reuse:
            self._revoke_all_after_reuse(reuse.owner_id)
            raise Unauthorized(INVALID_REFRESH_TOKEN)
        logger.info("Refresh token rotated for user %s", issued.user.id)
        return issued

    def logout(self, refresh_token: str) -> None:
        _require_strings("Refresh token is required", refresh_token)
        fingerprint = fingerprint_token(refresh_token)

        def _logout():
            try:
                record = self.ledger.lookup_by_fingerprint(fingerprint)
            except NotFound:
                raise Unauthorized(INVALID_REFRESH_TOKEN)
            if record.is_revoked() or not self.ledger.revoke(record, self._clock()):
                raise AlreadyRevoked("Already logged out")
            return record.user_id

        user_id = self._in_transaction(_logout)
        logger.info("Logout succeeded for user %s", user_id)

    def verify_access_token(self, token: str) -> AccessIdentity:
        try:
            claims = decode_token(token, self.settings.secret, expected_type=ACCESS)
        except TokenError as exc:
            raise Unauthorized("Invalid token") from exc
        return AccessIdentity(user_id=claims.owner_id, email=claims.email)

    # ------------------------------------------------------------------
    # refresh-token reuse
    # ------------------------------------------------------------------
    def _on_reuse(self, owner_id: str):
        logger.warning("Revoked refresh token presented again for user %s", owner_id)
        if self.settings.revoke_sessions_on_reuse:
            raise _ReuseDetected(owner_id)

    def _revoke_all_after_reuse(self, owner_id: str):
        def _revoke_all():
            return self.ledger.revoke_all_for_owner(owner_id, self._clock())

        count = self._in_transaction(_revoke_all)
        logger.warning("Revoked %d active refresh tokens for user %s after reuse", count, owner_id)


class _ReuseDetected(Unauthorized):
    def __init__(self, owner_id: str):
        super().__init__(INVALID_REFRESH_TOKEN)
        self.owner_id = owner_id
