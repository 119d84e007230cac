"""Engine error kinds and Flask error handlers."""
from flask import jsonify
from typing import Any


class AppError(Exception):
    """Base application error with a machine-readable code and HTTP status."""

    def __init__(self, code: str, message: str, status: int = 400) -> None:
        """Initialise the error.

        Args:
            code: Machine-readable error code.
            message: Human-readable description.
            status: HTTP status code.
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status


class NotFoundError(AppError):
    """Raised for an unknown game, code or player."""

    def __init__(self, message: str = "Game not found.") -> None:
        super().__init__("NOT_FOUND", message, 404)


class ConflictError(AppError):
    """Raised for duplicate joins and attempts to redo one-time operations."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFLICT", message, 409)


class ForbiddenError(AppError):
    """Raised when a player tries an action they are not permitted to perform."""

    def __init__(self, message: str = "You are not permitted to perform this action.") -> None:
        super().__init__("FORBIDDEN", message, 403)


class CapacityError(AppError):
    """Raised when the roster would fall outside its allowed size."""

    def __init__(self, message: str) -> None:
        super().__init__("CAPACITY", message, 409)


class InvalidTransitionError(AppError):
    """Raised when an action is not valid for the current phase or its precondition is unmet."""

    def __init__(self, message: str = "Action not valid for the current game phase.") -> None:
        super().__init__("INVALID_TRANSITION", message, 409)


class ValidationError(AppError):
    """Raised when request data or an action target fails validation."""

    def __init__(self, message: str) -> None:
        super().__init__("VALIDATION_ERROR", message, 400)


class UnavailableError(AppError):
    """Raised when the storage layer cannot be reached. Safe to retry."""

    def __init__(self, message: str = "Storage is temporarily unavailable.") -> None:
        super().__init__("UNAVAILABLE", message, 503)


class UnauthorizedError(AppError):
    """Raised when the client id header is missing."""

    def __init__(self) -> None:
        super().__init__("UNAUTHORIZED", "Missing client id.", 401)


def register_error_handlers(app: Any) -> None:
    """Register error handlers on the Flask app.

    Args:
        app: The Flask application instance.
    """

    @app.errorhandler(AppError)
    def handle_app_error(err: AppError):
        return jsonify({"error": err.code, "message": err.message}), err.status

    @app.errorhandler(404)
    def handle_404(err):
        return jsonify({"error": "NOT_FOUND", "message": "The requested resource was not found."}), 404

    @app.errorhandler(405)
    def handle_405(err):
        return jsonify({"error": "METHOD_NOT_ALLOWED", "message": "Method not allowed."}), 405

    @app.errorhandler(500)
    def handle_500(err):
        return jsonify({"error": "INTERNAL_ERROR", "message": "An internal server error occurred."}), 500
