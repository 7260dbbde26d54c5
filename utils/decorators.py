from __future__ import annotations
from functools import wraps
from flask import request, g, current_app

from services.exceptions import Unauthorized


def get_session_manager():
    """The SessionManager built by create_app()."""
    return current_app.extensions["session_manager"]


def bearer_token_from_header(header: str | None) -> str:
    """Extract <token> from "Bearer <token>"; Unauthorized if absent or garbled."""
    if not header:
        raise Unauthorized("Authorization header required")
    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1].strip():
        raise Unauthorized("Invalid authorization header format")
    return parts[1].strip()


def jwt_required():
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = bearer_token_from_header(request.headers.get("Authorization"))
            identity = get_session_manager().verify_access_token(token)
            # attach the caller's identity for the view
            g.current_user_id = identity.user_id
            g.current_user_email = identity.email
            return fn(*args, **kwargs)

        return wrapper

    return decorator
