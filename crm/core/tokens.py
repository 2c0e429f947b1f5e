"""Bearer token helpers (issue and verify signed, time-limited JWTs)."""

from __future__ import annotations

import re
import time
from typing import Any

import jwt

ALGORITHM = "HS256"

_DURATION = re.compile(
    r"^(?P<value>\d+(?:\.\d+)?)\s*(?P<unit>ms|msecs?|milliseconds?|s|secs?|seconds?|m|mins?|minutes?"
    r"|h|hrs?|hours?|d|days?|w|weeks?|y|yrs?|years?)?$",
    re.IGNORECASE,
)
_UNIT_SECONDS = {
    "ms": 0.001,
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 24 * 60 * 60,
    "w": 7 * 24 * 60 * 60,
    "y": 365.25 * 24 * 60 * 60,
}


class TokenError(Exception):
    """Raised when a token is missing, malformed, badly signed or expired."""


def parse_ttl(value: Any) -> int:
    """
    Convert a token expiry setting into seconds.

    Accepts numbers (seconds) and duration strings such as ``"1h"``, ``"30m"``
    or ``"7 days"``. A bare numeric string is read as seconds.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid token expiry: {value!r}")
    if isinstance(value, (int, float)):
        if value < 0:
            raise ValueError(f"Invalid token expiry: {value!r}")
        return int(value)
    match = _DURATION.match(str(value or "").strip())
    if not match:
        raise ValueError(f"Invalid token expiry: {value!r}")
    # no unit means seconds, unlike jsonwebtoken where "60" is 60 ms
    unit = (match.group("unit") or "s").lower()
    key = "ms" if unit.startswith("ms") or unit.startswith("milli") else unit[0]
    return int(float(match.group("value")) * _UNIT_SECONDS[key])


def issue_token(claims: dict, secret: str, ttl_seconds: int, *, now: int | None = None) -> str:
    issued_at = int(now if now is not None else time.time())
    payload = dict(claims)
    payload["iat"] = issued_at
    payload["exp"] = issued_at + ttl_seconds
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def verify_token(token: str, secret: str) -> dict:
    if not token:
        raise TokenError("Missing token")
    try:
        return jwt.decode(token, secret, algorithms=[ALGORITHM], options={"require": ["exp"]})
    except jwt.PyJWTError as exc:
        raise TokenError(str(exc)) from exc
