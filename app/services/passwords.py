"""Password hashing and strength rules."""

from functools import lru_cache

import bcrypt

from app.config import get_settings

# bcrypt only looks at the first 72 bytes of a password.
_BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a password with a fresh salt at the configured cost factor."""
    rounds = get_settings().BCRYPT_ROUNDS
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check a password against a stored hash. Malformed hashes never match."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def validate_strength(password: str) -> str | None:
    """Return an error message if the password is too weak, None if acceptable."""
    min_length = get_settings().MIN_PASSWORD_LENGTH
    if len(password) < min_length:
        return f"Password must be at least {min_length} characters"
    return None


@lru_cache
def dummy_hash() -> str:
    """Hash at the configured cost, checked when the email is unknown so failed logins take equal time."""
    return hash_password("psychedbox-dummy-password")
