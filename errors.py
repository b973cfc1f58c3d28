"""
Error taxonomy for the JSON API.

Stores and route handlers raise these; ``register_error_handlers`` renders
them as ``{"error": message}`` with the matching status code.
"""

from __future__ import annotations

import logging
import sqlite3

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class Unauthenticated(APIError):
    status_code = 401


class Forbidden(APIError):
    status_code = 403


class NotFound(APIError):
    status_code = 404


class Conflict(APIError):
    """Unique-constraint style rejections (duplicate email, already enrolled)."""
    status_code = 400


class ValidationError(APIError):
    status_code = 400


class InternalFailure(APIError):
    status_code = 500


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(APIError)
    def _handle_api_error(err: APIError):
        if err.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.path, err.message)
        return jsonify({"error": err.message}), err.status_code

    @app.errorhandler(sqlite3.Error)
    def _handle_db_error(err: sqlite3.Error):
        logger.exception("Unhandled database error on %s %s", request.method, request.path)
        return jsonify({"error": f"Database error: {err}"}), 500

    @app.errorhandler(HTTPException)
    def _handle_http_error(err: HTTPException):
        # Keep /api responses JSON, including 404/405/429 raised by Flask itself
        if request.path.startswith("/api"):
            return jsonify({"error": err.description or err.name}), err.code
        return err
