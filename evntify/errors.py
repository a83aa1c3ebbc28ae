"""
Error taxonomy shared by every service.

Services raise these; the gateway turns them into the JSON envelope
`{"message": str}` with the matching status code.
"""

import logging
from typing import Optional, Tuple

from flask import Flask, jsonify, Response
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    """Base class for errors that are safe to show to the client."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(ApiError):
    status_code = 400
    message = "Invalid request"


class InvalidCredentials(ApiError):
    status_code = 400
    message = "Invalid email or password"


class Unauthenticated(ApiError):
    status_code = 401
    message = "Access denied. No token provided."


class InvalidToken(ApiError):
    status_code = 400
    message = "Invalid token"


class Forbidden(ApiError):
    status_code = 403
    message = "Not authorized to modify this event"


class NotFound(ApiError):
    status_code = 404
    message = "Not found"


class Conflict(ApiError):
    status_code = 400
    message = "User already exists with this email"


class AlreadyRegistered(ApiError):
    status_code = 400
    message = "You are already registered for this event"


class CapacityExceeded(ApiError):
    status_code = 400
    message = "Event is at full capacity"


class InternalError(ApiError):
    status_code = 500


def register_error_handlers(app: Flask) -> None:
    """
    Attach the JSON error envelope to the app.

    - ApiError: rendered as-is.
    - HTTPException (404 route, 405, bad JSON): same envelope, werkzeug's description.
    - Anything else: logged with traceback, collapsed to InternalError.
    """

    @app.errorhandler(ApiError)
    def handle_api_error(error: ApiError) -> Tuple[Response, int]:
        return jsonify({"message": error.message}), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException) -> Tuple[Response, int]:
        return jsonify({"message": error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception) -> Tuple[Response, int]:
        logging.exception(f"[Gateway] Unhandled error: {error}")
        internal = InternalError()
        return jsonify({"message": internal.message}), internal.status_code
