"""
security helpers:
- Argon2 password hashing via argon2-cffi (slow, salted, tunable work factor)
- SHA-256 fingerprints for refresh tokens (fast, deterministic lookup key)

Passwords are low-entropy secrets so they get Argon2id. Refresh tokens are
high-entropy signed values, so a plain digest is enough to keep the raw token
out of the database while still allowing an equality lookup.
"""
from __future__ import annotations

import hashlib

from argon2 import PasswordHasher
from argon2.exceptions import HashingError, InvalidHashError, VerificationError

from services.exceptions import HashingFailure

ph = PasswordHasher()


def build_password_hasher(time_cost: int | None = None,
                          memory_cost: int | None = None,
                          parallelism: int | None = None) -> PasswordHasher:
    """Return an Argon2id hasher; unset parameters keep argon2-cffi's defaults."""
    kwargs = {}
    if time_cost:
        kwargs["time_cost"] = int(time_cost)
    if memory_cost:
        kwargs["memory_cost"] = int(memory_cost)
    if parallelism:
        kwargs["parallelism"] = int(parallelism)
    return PasswordHasher(**kwargs)


def hash_password(password: str, hasher: PasswordHasher | None = None) -> str:
    """Hash a plaintext password using Argon2
    """
    hasher = hasher or ph
    try:
        return hasher.hash(password)
    except HashingError as exc:
        raise HashingFailure(f"argon2 hashing failed: {exc}") from exc


def verify_password(password: str, password_hash: str, hasher: PasswordHasher | None = None) -> bool:
    """ Verify a plaintext password using argon2. Never raises.
    """
    if not isinstance(password, str) or not isinstance(password_hash, str) or not password_hash:
        return False
    hasher = hasher or ph
    try:
        return hasher.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(password_hash: str, hasher: PasswordHasher | None = None) -> bool:
    hasher = hasher or ph
    try:
        return hasher.check_needs_rehash(password_hash)
    except InvalidHashError:
        return True


def fingerprint_token(raw_token: str) -> str:
    """SHA-256 hex digest of a raw refresh token, used as its storage key."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()
