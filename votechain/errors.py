import traceback

from flask import jsonify, g, current_app
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    """Base class for errors that map to a JSON error response."""

    status_code = 400
    code = "BAD_REQUEST"

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(ApiError):
    status_code = 400
    code = "VALIDATION_ERROR"


class AuthenticationError(ApiError):
    status_code = 401
    code = "AUTHENTICATION_ERROR"


class AuthorizationError(ApiError):
    status_code = 403
    code = "AUTHORIZATION_ERROR"


class NotFoundError(ApiError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(ApiError):
    status_code = 400
    code = "CONFLICT"


class VotingClosedError(ConflictError):
    code = "VOTING_CLOSED"


class DuplicateVoteError(ConflictError):
    code = "DUPLICATE_VOTE"


def _payload(code: str, message: str, details=None, status=400, **extra):
    body = {
        "success": False,
        "message": message,
        "error": {
            "code": code,
            "message": message,
            "details": details or None,
        },
        "request_id": getattr(g, "request_id", None),
    }
    body.update(extra)
    return jsonify(body), status


def error_response(err: ApiError):
    return _payload(err.code, err.message, err.details, status=err.status_code)


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(e: ApiError):
        if e.status_code >= 500:
            app.logger.error("%s request_id=%s", e.message, getattr(g, "request_id", None))
        return error_response(e)

    # Generic HTTP errors (404, 405, etc.)
    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        desc = e.description

        if isinstance(desc, dict):
            code = desc.get("code") or e.name.replace(" ", "_").upper()
            message = desc.get("message") or e.name
            details = desc.get("errors") or desc.get("details")
            return _payload(code=code, message=message, details=details, status=e.code or 400)

        return _payload(
            code=e.name.replace(" ", "_").upper(),
            message=desc or e.name,
            details=None,
            status=e.code or 400
        )

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        # Always log full traceback with request_id
        app.logger.exception("Unhandled exception request_id=%s", getattr(g, "request_id", None))

        extra = {}
        if not current_app.config.get("IS_PRODUCTION"):
            extra["detail"] = repr(e)
            extra["stack"] = "".join(traceback.format_exception(type(e), e, e.__traceback__))
        return _payload("INTERNAL_SERVER_ERROR", "Server Error", status=500, **extra)
