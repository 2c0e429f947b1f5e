"""Security helpers (hashing and verification)."""

from __future__ import annotations

import bcrypt
from argon2 import PasswordHasher, exceptions as argon_exc

_ph = PasswordHasher()
_PREFIX = "argon2$"
_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def hash_password(password: str) -> str:
    """Create a modern Argon2 hash with a prefix for detection."""
    hashed = _ph.hash(password)
    return f"{_PREFIX}{hashed}"


def _verify_bcrypt(password: str, stored: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), stored.encode("utf-8"))
    except ValueError:
        # malformed hash or password over the 72 byte bcrypt limit
        return False


def verify_password(password: str, stored_hash: str | None) -> bool:
    stored = stored_hash or ""
    if stored.startswith(_PREFIX):
        hashed = stored[len(_PREFIX) :]
        try:
            return _ph.verify(hashed, password)
        except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
            return False
    if stored.startswith(_BCRYPT_PREFIXES):
        return _verify_bcrypt(password, stored)
    return False


def needs_rehash(stored_hash: str | None) -> bool:
    """True for legacy bcrypt hashes and Argon2 hashes built with outdated parameters."""
    stored = stored_hash or ""
    if not stored.startswith(_PREFIX):
        return True
    try:
        return _ph.check_needs_rehash(stored[len(_PREFIX) :])
    except argon_exc.InvalidHashError:
        return True
