"""Centralized JSON error envelope for the API.

Every handled failure is rendered as::

    {"statusCode": 404, "message": "...", "error": "Not Found", "code": "not_found",
     "timestamp": "...", "path": "/api/v1/...", "requestId": "..."}

with an optional ``details`` object (validation messages).
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from flask_limiter import RateLimitExceeded
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from todo_api.core.logger import ensure_request_id
from todo_api.services._shared.errors import (
    ForbiddenError,
    InvalidCredentialsError,
    RecordNotFoundError,
    ServiceError,
    ServiceValidationError,
    TokenExpiredError,
    TokenInvalidError,
    UniqueConstraintError,
)

log = logging.getLogger(__name__)

VALIDATION_MESSAGE = "Validation error"
TOO_MANY_REQUESTS_MESSAGE = "Too many requests, please try again later"
INTERNAL_ERROR_MESSAGE = "Internal server error"

# Service error type -> (HTTP status, stable code); first match wins
_SERVICE_ERROR_MAP: tuple[tuple[type[ServiceError], HTTPStatus, str], ...] = (
    (InvalidCredentialsError, HTTPStatus.UNAUTHORIZED, "invalid_credentials"),
    (TokenExpiredError, HTTPStatus.UNAUTHORIZED, "token_expired"),
    (TokenInvalidError, HTTPStatus.UNAUTHORIZED, "token_invalid"),
    (ForbiddenError, HTTPStatus.FORBIDDEN, "forbidden"),
    (RecordNotFoundError, HTTPStatus.NOT_FOUND, "not_found"),
    (UniqueConstraintError, HTTPStatus.CONFLICT, "unique_constraint"),
    (ServiceValidationError, HTTPStatus.BAD_REQUEST, "validation_error"),
)


def _http_status_to_code(status_code: int) -> str:
    """Map common HTTP status codes to canonical, stable error codes."""
    mapping = {
        400: "bad_request",
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
        413: "payload_too_large",
        415: "unsupported_media_type",
        429: "too_many_requests",
        500: "internal_server_error",
        503: "service_unavailable",
    }
    return mapping.get(status_code, "error")


def build_envelope(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build the uniform error body.

    :param status: HTTP status code.
    :param code: Stable machine-consumable error code.
    :param message: Human-readable error summary (safe for clients).
    :param details: Optional safe, structured details.
    :returns: Envelope dictionary.
    :rtype: dict
    """
    body: dict[str, Any] = {
        "statusCode": int(status),
        "message": message,
        "error": HTTPStatus(status).phrase,
        "code": code,
        "timestamp": datetime.now(UTC).isoformat(timespec="milliseconds"),
        "path": request.path,
        "requestId": ensure_request_id(),
    }
    if details:
        body["details"] = details
    return body


def _envelope_response(body: dict[str, Any]) -> tuple[Response, int]:
    status = int(body["statusCode"])
    level = log.error if status >= 500 else log.warning
    level(
        "request.failed: code=%s status=%s msg=%s",
        body["code"],
        status,
        body["message"],
        extra={"path": body["path"], "status": status},
    )
    return jsonify(body), status


class APIError(Exception):
    """
    Represent a JSON-serializable API error raised by the HTTP layer itself.

    Parameters
    ----------
    message : str
        Human-readable description presented to clients.
    status_code : int, optional
        HTTP status code to return. Defaults to ``400``.
    code : str, optional
        Machine-readable identifier, typically snake_case.
    details : dict[str, Any] | None, optional
        Optional structured payload included in the response body.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}

    def to_envelope(self) -> dict[str, Any]:
        return build_envelope(
            status=self.status_code,
            code=self.code,
            message=self.message,
            details=self.details or None,
        )


def translate_service_error(exc: ServiceError) -> APIError:
    """
    Map a framework-agnostic service error to its HTTP representation.

    Unknown :class:`ServiceError` subclasses become ``400 bad_request``.
    """
    for error_type, status, code in _SERVICE_ERROR_MAP:
        if isinstance(exc, error_type):
            details = None
            if isinstance(exc, ServiceValidationError) and exc.errors:
                details = {"errors": exc.errors}
            return APIError(str(exc), status_code=status, code=code, details=details)
    return APIError(str(exc) or "Bad request", status_code=HTTPStatus.BAD_REQUEST)


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Notes
    -----
    - Every handled error is rendered with the same envelope.
    - 4xx are logged as warnings; 5xx as errors with ``exc_info``.
    - Internals (SQL, tracebacks) never reach the client.
    """

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        return _envelope_response(err.to_envelope())

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        return _envelope_response(translate_service_error(err).to_envelope())

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        body = build_envelope(
            status=HTTPStatus.BAD_REQUEST,
            code="validation_error",
            message=VALIDATION_MESSAGE,
            details={"errors": err.normalized_messages()},
        )
        return _envelope_response(body)

    @app.errorhandler(RateLimitExceeded)
    def handle_rate_limit(err: RateLimitExceeded):
        body = build_envelope(
            status=HTTPStatus.TOO_MANY_REQUESTS,
            code="too_many_requests",
            message=TOO_MANY_REQUESTS_MESSAGE,
        )
        # X-RateLimit-* headers are injected by the limiter's after_request hook
        return _envelope_response(body)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = _http_status_to_code(status)
        message = (err.description or code.replace("_", " ").capitalize()).strip()
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        return _envelope_response(build_envelope(status=status, code=code, message=message))

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        log.error("IntegrityError reached the boundary", exc_info=True)
        body = build_envelope(
            status=HTTPStatus.CONFLICT, code="conflict", message="Resource conflict"
        )
        return _envelope_response(body)

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        log.error("OperationalError reached the boundary", exc_info=True)
        body = build_envelope(
            status=HTTPStatus.SERVICE_UNAVAILABLE,
            code="service_unavailable",
            message="Service temporarily unavailable",
        )
        return _envelope_response(body)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        log.error("Unhandled exception", exc_info=True)
        body = build_envelope(
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            code="internal_server_error",
            message=INTERNAL_ERROR_MESSAGE,
        )
        return _envelope_response(body)
