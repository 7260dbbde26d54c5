"""
User directory: account lookups and creation on top of DBStorage.
"""
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.user import User
from services.exceptions import Conflict, PersistenceFailure
from utils.validators import normalize_email

logger = logging.getLogger(__name__)


class UserDirectory:
    def __init__(self, storage):
        self._storage = storage

    def get_by_email(self, email: str) -> User | None:
        session = self._storage.get_session()
        try:
            return session.query(User).filter(User.email == normalize_email(email)).first()
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"user lookup failed: {exc}") from exc

    def get_by_id(self, user_id: str) -> User | None:
        try:
            return self._storage.get(User, str(user_id))
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"user lookup failed: {exc}") from exc

    def create(self, email: str, password_hash: str, name: str) -> User:
        """Add a new account and flush it; the caller commits."""
        user = User(email=normalize_email(email), password_hash=password_hash, name=name)
        self._storage.new(user)
        try:
            self._storage.flush()
        except IntegrityError as exc:
            # lost a race with a concurrent signup for the same email
            logger.info("User insert hit the unique email index")
            raise Conflict("User with this email already exists") from exc
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"user insert failed: {exc}") from exc
        return user

    def update_password_hash(self, user: User, password_hash: str) -> None:
        user.password_hash = password_hash
        self._storage.new(user)
        try:
            self._storage.flush()
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"user update failed: {exc}") from exc
