"""
Account operations: registration, login and profile lookup.

These functions only talk to the store and raise errors from
evntify.errors; the routes add tokens and build responses.
"""

import logging
from typing import Any, Dict

from evntify.auth_service.utils import hash_password, verify_password
from evntify.database.store import Store
from evntify.errors import InvalidCredentials, NotFound, ValidationError

# Column limits in schema.sql
NAME_MAX_LENGTH = 200
EMAIL_MAX_LENGTH = 320


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """User view safe to return to clients (no password hash)."""
    return {
        "id": user["id"],
        "name": user["name"],
        "email": user["email"],
        "role": user["role"],
    }


def normalize_email(value: Any) -> str:
    return (value or "").strip().lower() if isinstance(value, str) else ""


def register_user(store: Store, data: Dict[str, Any], min_password_length: int = 6) -> Dict[str, Any]:
    """
    Create a user with a hashed password.

    Raises:
        ValidationError: missing name/email/password, bad email, short password.
        Conflict: email already registered.
    """
    name = data.get("name")
    email = normalize_email(data.get("email"))
    password = data.get("password")

    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Name, email and password are required")
    if not email or not isinstance(password, str) or not password:
        raise ValidationError("Name, email and password are required")
    if "@" not in email:
        raise ValidationError("Invalid email address")
    if len(name.strip()) > NAME_MAX_LENGTH:
        raise ValidationError(f"Name must be {NAME_MAX_LENGTH} characters or less.")
    if len(email) > EMAIL_MAX_LENGTH:
        raise ValidationError(f"Email must be {EMAIL_MAX_LENGTH} characters or less.")
    if len(password) < min_password_length:
        raise ValidationError(f"Password must be at least {min_password_length} characters")

    user = store.create_user(name.strip(), email, hash_password(password))
    logging.info(f"[Auth] Registered user {user['id']}")
    return user


def authenticate(store: Store, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Look up a user by email and check the password.

    Unknown email and wrong password fail the same way.
    """
    email = normalize_email(data.get("email"))
    password = data.get("password")

    if not email or not isinstance(password, str) or not password:
        raise ValidationError("Email and password are required")

    user = store.get_user_by_email(email)
    if not user or not verify_password(user["password_hash"], password):
        logging.warning("[Auth] Failed login attempt")
        raise InvalidCredentials()

    return user


def get_profile(store: Store, user_id: int) -> Dict[str, Any]:
    user = store.get_user(user_id)
    if not user:
        raise NotFound("User not found")

    profile = public_user(user)
    profile["created_at"] = user["created_at"].isoformat()
    return profile
