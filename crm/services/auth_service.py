"""
Authentication and identity related use cases.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError as SchemaError

from crm.core.security import hash_password, needs_rehash, verify_password
from crm.core.tokens import TokenError, issue_token, parse_ttl, verify_token
from crm.domain.models import AuthSettings
from crm.repositories.json_store import CorruptDataError, JsonStore
from crm.services.errors import NotFoundError, ServiceError

logger = logging.getLogger(__name__)

USERS = "users"
SETTINGS = "settings"

INVALID_CREDENTIALS = "Invalid credentials."


class AuthError(ServiceError):
    """Base class for authentication-related exceptions."""


class RegistrationError(AuthError):
    status_code = 400


class InvalidCredentialsError(AuthError):
    status_code = 400

    def __init__(self, message: str = INVALID_CREDENTIALS):
        super().__init__(message)


class TokenInvalidError(AuthError):
    status_code = 401


@dataclass
class TokenClaims:
    user_id: str
    role_id: Optional[str]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _same_email(left: str | None, right: str | None) -> bool:
    return (left or "").strip().lower() == (right or "").strip().lower()


def public_user(user: dict) -> dict:
    return {
        "id": user.get("id"),
        "email": user.get("email"),
        "roleId": user.get("roleId"),
        "createdAt": user.get("createdAt"),
    }


class AuthService:
    """Handles registration, login, bearer token checks and the current user's profile."""

    def __init__(self, store: JsonStore) -> None:
        self.store = store

    # -------------------------------------- helpers --------------------------------------
    def _auth_settings(self) -> AuthSettings:
        raw = self.store.load(SETTINGS)
        if not isinstance(raw, dict):
            raise CorruptDataError(SETTINGS, "expected a JSON object")
        try:
            return AuthSettings.model_validate(raw)
        except SchemaError as exc:
            raise CorruptDataError(SETTINGS, f"invalid auth settings: {exc.error_count()} error(s)") from exc

    def _find_user(self, users: list, *, email: str | None = None, user_id: str | None = None) -> Optional[dict]:
        for user in users:
            if not isinstance(user, dict):
                continue
            if email is not None and _same_email(user.get("email"), email):
                return user
            if user_id is not None and user.get("id") == user_id:
                return user
        return None

    # -------------------------------------- registration --------------------------------------
    def register(self, email: str, password: str, role_id: str) -> dict:
        raw_email = (email or "").strip()
        role = (role_id or "").strip()
        if not raw_email or not password or not role:
            raise RegistrationError("Email, password & roleId are required.")
        password_hash = hash_password(password)

        def _insert(users: list) -> dict:
            if self._find_user(users, email=raw_email):
                raise RegistrationError("Email already registered.")
            user = {
                "id": str(uuid.uuid4()),
                "email": raw_email,
                "passwordHash": password_hash,
                "roleId": role,
                "createdAt": _now_iso(),
            }
            users.append(user)
            return user

        user = self.store.update_list(USERS, _insert)
        logger.info("Registered user %s", user["id"])
        return public_user(user)

    # -------------------------------------- login --------------------------------------
    def login(self, email: str, password: str) -> str:
        raw_email = (email or "").strip()
        if not raw_email or not password:
            raise RegistrationError("Email & password are required.")
        user = self._find_user(self.store.load_list(USERS), email=raw_email)
        if not user or not verify_password(password, user.get("passwordHash")):
            logger.warning("Failed login attempt")
            raise InvalidCredentialsError()
        if needs_rehash(user.get("passwordHash")):
            self._upgrade_hash(user["id"], password)

        settings = self._auth_settings()
        try:
            ttl = parse_ttl(settings.token_expiry)
        except ValueError as exc:
            raise CorruptDataError(SETTINGS, str(exc)) from exc
        return issue_token({"userId": user["id"], "roleId": user.get("roleId")}, settings.jwt_secret, ttl)

    def _upgrade_hash(self, user_id: str, password: str) -> None:
        new_hash = hash_password(password)

        def _apply(users: list) -> None:
            user = self._find_user(users, user_id=user_id)
            if user is not None:
                user["passwordHash"] = new_hash

        self.store.update_list(USERS, _apply)
        logger.info("Upgraded password hash for user %s", user_id)

    # -------------------------------------- bearer tokens --------------------------------------
    def authenticate(self, token: str) -> TokenClaims:
        settings = self._auth_settings()
        try:
            payload = verify_token(token, settings.jwt_secret)
        except TokenError:
            raise TokenInvalidError("Invalid or expired token.") from None
        user_id = payload.get("userId")
        if not user_id:
            raise TokenInvalidError("Invalid or expired token.")
        return TokenClaims(user_id=str(user_id), role_id=payload.get("roleId"))

    # -------------------------------------- profile --------------------------------------
    def get_profile(self, user_id: str) -> dict:
        user = self._find_user(self.store.load_list(USERS), user_id=user_id)
        if not user:
            raise NotFoundError("User not found.")
        return public_user(user)

    def update_profile(self, user_id: str, email: str | None = None, password: str | None = None) -> dict:
        new_email = (email or "").strip()
        new_hash = hash_password(password) if password else None

        def _apply(users: list) -> dict:
            user = self._find_user(users, user_id=user_id)
            if not user:
                raise NotFoundError("User not found.")
            if new_email and not _same_email(new_email, user.get("email")):
                other = self._find_user(users, email=new_email)
                if other is not None and other.get("id") != user_id:
                    raise RegistrationError("Email already registered.")
                user["email"] = new_email
            if new_hash:
                user["passwordHash"] = new_hash
            return user

        user = self.store.update_list(USERS, _apply)
        return public_user(user)
