"""Centralised error handling and custom exceptions.

The service layer raises these exceptions to signal specific error
conditions without coupling itself to HTTP status codes. The
application factory registers handlers that serialise each of them into
a JSON error envelope.
"""
from __future__ import annotations

from flask import jsonify


class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, message: str, fields: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.fields = fields or {}

    def to_response(self, status_code: int = 400):
        response = {
            "error": {
                "code": "VALIDATION_ERROR",
                "message": self.message,
                "fields": self.fields,
            }
        }
        return jsonify(response), status_code


class NotFoundError(Exception):
    """Raised when a requested resource cannot be found."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_response(self, status_code: int = 404):
        response = {
            "error": {
                "code": "NOT_FOUND",
                "message": self.message,
            }
        }
        return jsonify(response), status_code


class ConflictError(Exception):
    """Raised when a uniqueness or resource conflict occurs."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_response(self, status_code: int = 409):
        response = {
            "error": {
                "code": "CONFLICT",
                "message": self.message,
            }
        }
        return jsonify(response), status_code


class StorageError(Exception):
    """Raised when a read or write against the database fails.

    Wraps the underlying SQLAlchemy exception so callers can tell a lost
    save apart from bad input.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_response(self, status_code: int = 500):
        response = {
            "error": {
                "code": "STORAGE_ERROR",
                "message": self.message,
            }
        }
        return jsonify(response), status_code


def register_error_handlers(app) -> None:
    """Register custom error handlers on the given Flask app."""
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        return err.to_response(400)

    @app.errorhandler(NotFoundError)
    def handle_not_found_error(err: NotFoundError):
        return err.to_response(404)

    @app.errorhandler(ConflictError)
    def handle_conflict_error(err: ConflictError):
        return err.to_response(409)

    @app.errorhandler(StorageError)
    def handle_storage_error(err: StorageError):
        return err.to_response(500)
