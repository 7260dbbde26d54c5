"""
Token codec: signs and verifies the compact bearer tokens handed to clients.

- JWTs via PyJWT, HMAC-SHA256 with the shared signing secret
- the accepted algorithm list is pinned here and never read from the token
  header, so "none" and asymmetric algorithms are rejected
- every token carries a random jti so two tokens minted in the same second
  for the same user still differ
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from services.exceptions import (
    ConfigFailure,
    InvalidInput,
    InvalidSignature,
    MalformedToken,
    TokenExpired,
)
from utils.validators import validate_email

TOKEN_ISSUER = "task-management-auth"
SIGNING_ALGORITHM = "HS256"
ACCEPTED_ALGORITHMS = [SIGNING_ALGORITHM]

ACCESS = "access"
REFRESH = "refresh"
TOKEN_TYPES = (ACCESS, REFRESH)

_REQUIRED_CLAIMS = ["sub", "email", "iat", "exp", "iss", "type", "jti"]


@dataclass(frozen=True)
class AccessClaims:
    owner_id: str
    email: str
    issued_at: datetime
    expires_at: datetime
    issuer: str
    token_type: str = ACCESS
    jti: str = ""


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _check_owner_id(owner_id) -> str:
    try:
        parsed = uuid.UUID(str(owner_id))
    except (TypeError, ValueError):
        raise InvalidInput("owner id must be a UUID")
    if parsed.int == 0:
        raise InvalidInput("owner id cannot be nil")
    return str(parsed)


def sign_token(owner_id, email: str, secret: str, ttl: timedelta, *,
               token_type: str = ACCESS, now: datetime | None = None) -> str:
    """Create a signed token for `owner_id` that expires `ttl` after `now`."""
    if not secret:
        raise ConfigFailure("JWT secret is not set")
    owner = _check_owner_id(owner_id)
    validate_email(email)
    if token_type not in TOKEN_TYPES:
        raise InvalidInput(f"unknown token type: {token_type}")

    issued_at = now or _now()
    payload = {
        "iss": TOKEN_ISSUER,
        "sub": owner,
        "email": email,
        "iat": issued_at,
        "exp": issued_at + ttl,
        "type": token_type,
        "jti": generate_jti(),
    }
    return jwt.encode(payload, secret, algorithm=SIGNING_ALGORITHM)


def decode_token(token: str, secret: str, *, expected_type: str = ACCESS) -> AccessClaims:
    """
    Decode and validate a token. Raises InvalidSignature, TokenExpired or
    MalformedToken; ConfigFailure if the secret is missing.
    """
    if not secret:
        raise ConfigFailure("JWT secret is not set")
    if not isinstance(token, str) or not token:
        raise MalformedToken("Token is empty")

    try:
        decoded = jwt.decode(
            token,
            secret,
            algorithms=ACCEPTED_ALGORITHMS,
            issuer=TOKEN_ISSUER,
            options={"require": _REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpired()
    except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError):
        raise InvalidSignature()
    except jwt.InvalidTokenError as exc:
        raise MalformedToken(f"Invalid token: {exc}")

    if decoded.get("type") != expected_type:
        raise MalformedToken("Wrong token type")
    email = decoded.get("email")
    if not isinstance(email, str):
        raise MalformedToken("Token email claim is invalid")
    try:
        owner = _check_owner_id(decoded.get("sub"))
    except InvalidInput:
        raise MalformedToken("Token subject is invalid")

    return AccessClaims(
        owner_id=owner,
        email=email,
        issued_at=datetime.fromtimestamp(decoded["iat"], tz=timezone.utc),
        expires_at=datetime.fromtimestamp(decoded["exp"], tz=timezone.utc),
        issuer=decoded["iss"],
        token_type=decoded["type"],
        jti=str(decoded["jti"]),
    )
