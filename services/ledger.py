"""
Refresh token ledger.

Persists one RefreshToken row per issued refresh token, keyed by the token's
fingerprint. Revocation is a conditional UPDATE that only matches rows whose
revoked_at is still NULL, so of two concurrent revokes of the same row exactly
one sees rowcount == 1. The session manager relies on that to stop a refresh
token from being rotated twice.

Methods flush but never commit; the session manager owns the transaction.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import List

from sqlalchemy.exc import SQLAlchemyError

from models.base_model import utcnow
from models.refresh_token import RefreshToken
from services.exceptions import NotFound, PersistenceFailure

logger = logging.getLogger(__name__)


class RefreshTokenLedger:
    def __init__(self, storage):
        self._storage = storage

    def store(self, owner_id: str, fingerprint: str, expires_at: datetime) -> RefreshToken:
        record = RefreshToken(user_id=str(owner_id), token_hash=fingerprint, expires_at=expires_at)
        self._storage.new(record)
        try:
            self._storage.flush()
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"refresh token insert failed: {exc}") from exc
        return record

    def lookup_by_fingerprint(self, fingerprint: str) -> RefreshToken:
        session = self._storage.get_session()
        try:
            record = session.query(RefreshToken).filter(RefreshToken.token_hash == fingerprint).first()
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"refresh token lookup failed: {exc}") from exc
        if record is None:
            raise NotFound("Refresh token not found")
        return record

    def revoke(self, record: RefreshToken, now: datetime | None = None) -> bool:
        """
        Set revoked_at on `record` if it is still unset.
        Returns True if this call revoked it, False if it was already revoked.
        """
        now = now or utcnow()
        session = self._storage.get_session()
        try:
            updated = (
                session.query(RefreshToken)
                .filter(RefreshToken.id == record.id, RefreshToken.revoked_at.is_(None))
                .update({RefreshToken.revoked_at: now}, synchronize_session="fetch")
            )
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"refresh token revoke failed: {exc}") from exc
        if not updated:
            logger.info("Refresh token %s was already revoked", record.id)
        return bool(updated)

    def revoke_all_for_owner(self, owner_id: str, now: datetime | None = None) -> int:
        """Revoke every live refresh token of `owner_id`; returns how many were revoked."""
        now = now or utcnow()
        session = self._storage.get_session()
        try:
            return (
                session.query(RefreshToken)
                .filter(RefreshToken.user_id == str(owner_id), RefreshToken.revoked_at.is_(None))
                .update({RefreshToken.revoked_at: now}, synchronize_session="fetch")
            )
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"refresh token revoke failed: {exc}") from exc

    def active_for_owner(self, owner_id: str, now: datetime | None = None) -> List[RefreshToken]:
        now = now or utcnow()
        session = self._storage.get_session()
        try:
            rows = (
                session.query(RefreshToken)
                .filter(RefreshToken.user_id == str(owner_id), RefreshToken.revoked_at.is_(None))
                .order_by(RefreshToken.created_at.asc())
                .all()
            )
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"refresh token lookup failed: {exc}") from exc
        return [r for r in rows if not r.is_expired(now)]
