"""
Error Handling Middleware
Typed API errors, centralized translation to JSON responses and logging
"""
import logging
from functools import wraps
from flask import jsonify
from werkzeug.exceptions import HTTPException
from ..utils.validators import Helpers

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map onto a client-facing response"""

    status_code = 400
    code = "INVALID_ARGUMENT"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgument(ApiError):
    status_code = 400
    code = "INVALID_ARGUMENT"


class InvalidCredentials(ApiError):
    status_code = 400
    code = "INVALID_CREDENTIALS"

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class Conflict(ApiError):
    status_code = 400
    code = "CONFLICT"


class Unauthenticated(ApiError):
    status_code = 401
    code = "UNAUTHENTICATED"

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class Forbidden(ApiError):
    status_code = 403
    code = "FORBIDDEN"


class NotFound(ApiError):
    status_code = 404
    code = "NOT_FOUND"


class ErrorHandler:
    """Centralized error handling service"""

    @staticmethod
    def handle_api_error(error: ApiError) -> tuple:
        if error.status_code in (401, 403):
            logger.warning(f"{error.code}: {error.message}")
        else:
            logger.info(f"{error.code}: {error.message}")

        body = Helpers.build_error_response(error.message, error.code)
        if isinstance(error, (InvalidCredentials, Conflict)):
            # account endpoints answer with the success/data envelope
            body.update({'success': False, 'data': None})
        return jsonify(body), error.status_code

    @staticmethod
    def handle_generic_error(error: Exception, message: str = "An unexpected error occurred") -> tuple:
        logger.exception(f"{message}: {error}")

        return jsonify(Helpers.build_error_response(
            message=message,
            code="INTERNAL_ERROR",
            details=str(error) or type(error).__name__
        )), 500


def api_errors(message: str):
    """Translate errors raised inside a view.

    ``ApiError`` subclasses become their own status; anything else is logged
    and answered with a 500 carrying ``message``.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except ApiError as e:
                return ErrorHandler.handle_api_error(e)
            except HTTPException:
                raise
            except Exception as e:
                return ErrorHandler.handle_generic_error(e, message)
        return decorated_function
    return decorator


def register_error_handlers(app):
    """Register error handlers with Flask app"""

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        return ErrorHandler.handle_api_error(error)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        code = (error.name or "Error").upper().replace(" ", "_")
        return jsonify(Helpers.build_error_response(
            message=error.description or error.name,
            code=code
        )), error.code

    @app.errorhandler(Exception)
    def handle_unhandled_exception(error):
        return ErrorHandler.handle_generic_error(error)
