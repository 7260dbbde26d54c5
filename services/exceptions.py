"""
Error taxonomy for the credential core.

Every exception carries the HTTP status and the error code that the API layer
renders in its uniform error envelope (see api/errors.py). 500-class errors
keep their detail for the logs only; the client sees a generic message.
"""
from __future__ import annotations


class AuthServiceError(Exception):
    status = 500
    code = "INTERNAL_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def public_message(self) -> str:
        """Message safe to send to the client."""
        if self.status >= 500:
            return AuthServiceError.default_message
        return self.message


class InvalidInput(AuthServiceError):
    status = 400
    code = "BAD_REQUEST"
    default_message = "Invalid input"


class Unauthorized(AuthServiceError):
    status = 401
    code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class NotFound(AuthServiceError):
    status = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class Conflict(AuthServiceError):
    status = 409
    code = "CONFLICT"
    default_message = "Conflict"


class AlreadyRevoked(Unauthorized):
    default_message = "Refresh token is already revoked"


# Token codec failures. The session layer normalizes all of them to Unauthorized.
class TokenError(Unauthorized):
    default_message = "Invalid token"


class InvalidSignature(TokenError):
    default_message = "Token signature is invalid"


class TokenExpired(TokenError):
    default_message = "Token has expired"


class MalformedToken(TokenError):
    default_message = "Token is malformed"


class ConfigFailure(AuthServiceError):
    default_message = "Service is misconfigured"


class PersistenceFailure(AuthServiceError):
    default_message = "Storage is unavailable"


class HashingFailure(AuthServiceError):
    default_message = "Password hashing failed"
