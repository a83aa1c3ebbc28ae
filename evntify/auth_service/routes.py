"""
Authentication route handlers.

Provides routes for:
- User registration
- User login
- Profile retrieval

Token logic is delegated to `auth_service.utils`, account rules to
`auth_service.service`.
"""

import logging
from typing import Any, Dict, Tuple

from flask import Blueprint, current_app, jsonify, request, Response

from evntify.auth_service import service
from evntify.auth_service.utils import create_token, verify_token_from_request
from evntify.database.db_connection import get_store
from evntify.errors import ValidationError

auth_bp = Blueprint("auth", __name__)


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


# --- REQUEST LOGGING ---
@auth_bp.before_request
def before_request() -> None:
    """Log method and path of every request (never headers: they carry tokens)."""
    logging.info(f"[Auth] Incoming {request.method} {request.path}")


@auth_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Auth] Response {response.status}")
    return response


# --- REGISTER ---
@auth_bp.route("/register", methods=["POST"])
def register() -> Tuple[Response, int]:
    """
    Register a new user.

    Expects a JSON body with:
    - name (str)
    - email (str): Unique email address.
    - password (str): At least MIN_PASSWORD_LENGTH characters.

    Returns:
        201: message, token, and the public user view.
        400: Missing fields, invalid input, or email already exists.
    """
    user = service.register_user(
        get_store(),
        _json_body(),
        min_password_length=current_app.config["MIN_PASSWORD_LENGTH"],
    )

    return jsonify({
        "message": "User registered successfully",
        "token": create_token(user),
        "user": service.public_user(user),
    }), 201


# --- LOGIN ---
@auth_bp.route("/login", methods=["POST"])
def login() -> Tuple[Response, int]:
    """
    Authenticate a user and return a JWT.

    Returns:
        200: message, token, and the public user view.
        400: Missing or invalid credentials.
    """
    user = service.authenticate(get_store(), _json_body())

    return jsonify({
        "message": "Login successful",
        "token": create_token(user),
        "user": service.public_user(user),
    }), 200


# --- CURRENT USER ---
@auth_bp.route("/profile", methods=["GET"])
def profile() -> Tuple[Response, int]:
    """
    Return the authenticated user's profile.

    Requires Authorization header: Bearer <token>

    Returns:
        200: User profile (no password hash).
        400: Invalid or expired token.
        401: Missing token.
        404: User not found.
    """
    claims = verify_token_from_request()
    return jsonify(service.get_profile(get_store(), claims["id"])), 200
