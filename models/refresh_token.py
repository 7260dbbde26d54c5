"""
RefreshToken model: one row per issued refresh token so it can be revoked and rotated.
Fields:
- user_id (String(36)) - FK to users.id
- token_hash (SHA-256 hex of the raw token, unique; the raw token is never stored)
- expires_at
- revoked_at (NULL while the token is live, set exactly once)
- created_at, updated_at
"""
from datetime import datetime

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base, as_utc, utcnow


class RefreshToken(BaseModel, Base):
    __tablename__ = "refresh_tokens"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token_hash = Column(String(64), nullable=False, unique=True, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    revoked_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="refresh_tokens")

    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def is_expired(self, now: datetime | None = None) -> bool:
        now = as_utc(now) if now else utcnow()
        return now >= as_utc(self.expires_at)

    def is_valid(self, now: datetime | None = None) -> bool:
        return not (self.is_expired(now) or self.is_revoked())

    def __repr__(self):
        state = "revoked" if self.is_revoked() else "active"
        return f"<RefreshToken id={self.id} user={self.user_id} {state}>"
