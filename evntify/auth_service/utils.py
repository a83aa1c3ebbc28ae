"""
Shared authentication helpers.
Provides password hashing, token creation and verification.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from flask import current_app, request

from evntify.errors import InvalidToken, Unauthenticated

ph = PasswordHasher()

TOKEN_CLAIMS = ("id", "email", "role")


# --- PASSWORDS ---
def hash_password(password: str) -> str:
    """One-way argon2 hash; the plaintext is never stored."""
    return ph.hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    """
    Check `password` against a stored argon2 hash.

    Returns False on mismatch or on a malformed stored hash.
    """
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


# --- JWT CREATION ---
def create_token(user: Dict[str, Any]) -> str:
    """
    Generates a signed JWT for a given user.

    Args:
        user (dict): Must carry "id", "email" and "role".

    Returns:
        str: Encoded JWT string, valid for TOKEN_EXPIRATION_DAYS.
    """
    config = current_app.config
    now = datetime.now(timezone.utc)

    payload = {
        "id": user["id"],
        "email": user["email"],
        "role": user["role"],
        "iat": now,
        "exp": now + timedelta(days=config["TOKEN_EXPIRATION_DAYS"]),
    }

    return jwt.encode(payload, config["JWT_SECRET"], algorithm=config["JWT_ALGORITHM"])


# --- JWT VALIDATION ---
def decode_token(token: str) -> Dict[str, Any]:
    """
    Verify a JWT and return its identity claims {id, email, role}.

    Raises:
        InvalidToken: bad signature, expired, or missing claims.
    """
    config = current_app.config
    try:
        payload = jwt.decode(token, config["JWT_SECRET"], algorithms=[config["JWT_ALGORITHM"]])
    except jwt.ExpiredSignatureError:
        raise InvalidToken("Token expired")
    except jwt.InvalidTokenError:
        raise InvalidToken()

    if any(payload.get(claim) is None for claim in TOKEN_CLAIMS):
        raise InvalidToken()

    return {claim: payload[claim] for claim in TOKEN_CLAIMS}


def verify_token_from_request() -> Dict[str, Any]:
    """
    Verify the JWT in the Authorization header.

    Role checks happen in the service layer, which compares the
    returned role against the resource being changed.

    Returns:
        dict: The caller's claims {id, email, role}.

    Raises:
        Unauthenticated: header missing or not a Bearer value.
        InvalidToken: token rejected by decode_token().
    """
    auth = request.headers.get("Authorization", "")

    if not auth.startswith("Bearer "):
        raise Unauthenticated()

    token = auth.split(" ", 1)[1].strip()
    if not token:
        raise Unauthenticated()

    return decode_token(token)
