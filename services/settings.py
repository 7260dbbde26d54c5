"""
Immutable auth settings, built once at startup and passed explicitly to the
session manager.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Mapping

from services.exceptions import ConfigFailure
from utils.durations import duration_or_default
from utils.validators import parse_bool

DEFAULT_ACCESS_TTL = timedelta(minutes=15)
DEFAULT_REFRESH_TTL = timedelta(days=7)


@dataclass(frozen=True)
class AuthSettings:
    secret: str
    access_ttl: timedelta = DEFAULT_ACCESS_TTL
    refresh_ttl: timedelta = DEFAULT_REFRESH_TTL
    hash_time_cost: int | None = None
    hash_memory_cost: int | None = None
    hash_parallelism: int | None = None
    revoke_sessions_on_reuse: bool = False

    def __post_init__(self):
        if not self.secret:
            raise ConfigFailure("JWT_SECRET is not set")

    @property
    def access_expires_in(self) -> int:
        """Access token lifetime in whole seconds, as reported to clients."""
        return int(self.access_ttl.total_seconds())

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "AuthSettings":
        """Build settings from a Flask config (or any mapping of the same keys)."""

        def _int_or_none(key):
            value = config.get(key)
            return int(value) if value not in (None, "") else None

        return cls(
            secret=config.get("JWT_SECRET") or "",
            access_ttl=duration_or_default(
                config.get("ACCESS_TOKEN_EXPIRY"), DEFAULT_ACCESS_TTL, "ACCESS_TOKEN_EXPIRY"
            ),
            refresh_ttl=duration_or_default(
                config.get("REFRESH_TOKEN_EXPIRY"), DEFAULT_REFRESH_TTL, "REFRESH_TOKEN_EXPIRY"
            ),
            hash_time_cost=_int_or_none("PASSWORD_HASH_TIME_COST"),
            hash_memory_cost=_int_or_none("PASSWORD_HASH_MEMORY_COST"),
            hash_parallelism=_int_or_none("PASSWORD_HASH_PARALLELISM"),
            revoke_sessions_on_reuse=parse_bool(config.get("REVOKE_SESSIONS_ON_REUSE", False)),
        )
