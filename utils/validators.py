"""
Input validators shared by the signup/login paths and the token codec, plus
the boolean parser used for environment flags.
"""
from __future__ import annotations

from services.exceptions import InvalidInput

EMAIL_MIN_LEN = 3    # a@b
EMAIL_MAX_LEN = 254

TRUTHY_VALUES = ("1", "true", "yes", "on")

_LOCAL_FORBIDDEN = set('()<>[]:;@\\,"')


def _is_local_part_valid(local: str) -> bool:
    if not local:
        return False
    if local[0] == "." or local[-1] == ".":
        return False
    for ch in local:
        if ord(ch) <= 0x1F or ord(ch) == 0x7F:
            return False
        if ch == " " or ch in _LOCAL_FORBIDDEN:
            return False
    return True


def _is_domain_valid(domain: str) -> bool:
    if not domain:
        return False
    if domain[0] == "." or domain[-1] == ".":
        return False
    dot_seen = False
    for ch in domain:
        if ch == ".":
            dot_seen = True
            continue
        if not (ch.isascii() and (ch.isalnum() or ch == "-")):
            return False
    return dot_seen


def validate_email(email) -> None:
    """Raise InvalidInput unless `email` is an acceptable address."""
    if not isinstance(email, str):
        raise InvalidInput("email must be a string")
    if len(email) < EMAIL_MIN_LEN or len(email) > EMAIL_MAX_LEN:
        raise InvalidInput("invalid email length")

    if email.count("@") != 1:
        raise InvalidInput("invalid email format")
    at_idx = email.index("@")
    if at_idx == 0 or at_idx == len(email) - 1:
        raise InvalidInput("invalid email format")

    if not _is_local_part_valid(email[:at_idx]):
        raise InvalidInput("invalid characters in local part")
    if not _is_domain_valid(email[at_idx + 1:]):
        raise InvalidInput("invalid domain")


def is_valid_email(email) -> bool:
    try:
        validate_email(email)
    except InvalidInput:
        return False
    return True


def normalize_email(email: str) -> str:
    return email.strip().lower()


def parse_bool(value) -> bool:
    """True for a bool True or one of TRUTHY_VALUES (any case); everything else is False."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUTHY_VALUES
