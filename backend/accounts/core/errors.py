"""Centralized JSON error handling for the API.

Every handled error is rendered with the same envelope::

    {"statusCode": 401, "message": "...", "success": false, "errors": []}
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from accounts.core.logger import ensure_request_id
from accounts.services._shared.errors import ServiceError

log = logging.getLogger(__name__)


def _as_envelope(*, status: int, message: str, errors: list[Any] | None = None) -> dict[str, Any]:
    """
    Build the error envelope returned to clients.

    :param status: HTTP status code.
    :param message: Human-readable error summary (safe for clients).
    :param errors: Optional list of structured, client-safe details.
    :returns: Envelope dictionary.
    :rtype: dict
    """
    return {
        "statusCode": status,
        "message": message,
        "success": False,
        "errors": list(errors or []),
    }


def _envelope_response(envelope: dict[str, Any]) -> Response:
    resp = jsonify(envelope)
    resp.status_code = envelope["statusCode"]
    return resp


class APIError(Exception):
    """
    Represent a JSON-serializable API error.

    Parameters
    ----------
    message : str
        Human-readable description presented to clients.
    status_code : int, optional
        HTTP status code to return. Defaults to ``400``.
    errors : list[Any] | None, optional
        Optional structured payload (e.g., validation messages) included in the
        ``errors`` array of the envelope.

    Attributes
    ----------
    message : str
        Error summary stored for serialization.
    status_code : int
        HTTP status code returned to the client.
    errors : list[Any]
        Arbitrary context specific to the error instance.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        errors: list[Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.errors = errors or []

    def to_envelope(self) -> dict[str, Any]:
        """
        Serialize error metadata into the response envelope.

        :returns: Envelope dictionary.
        :rtype: dict
        """
        return _as_envelope(status=self.status_code, message=self.message, errors=self.errors)


# Domain conveniences
class BadRequest(APIError):
    """400 for invalid input or rejected uploads."""

    def __init__(self, message: str = "Bad request", errors: list[Any] | None = None) -> None:
        super().__init__(message, status_code=HTTPStatus.BAD_REQUEST, errors=errors)


class Unauthorized(APIError):
    """401 when authentication fails."""

    def __init__(self, message: str = "Unauthorized access") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED)


class NotFound(APIError):
    """404 when resources are missing."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=HTTPStatus.NOT_FOUND)


class Conflict(APIError):
    """409 for uniqueness/constraint collisions."""

    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message, status_code=HTTPStatus.CONFLICT)


class InternalServerError(APIError):
    """500 for broken server-side invariants."""

    def __init__(self, message: str = "Something went wrong") -> None:
        super().__init__(message, status_code=HTTPStatus.INTERNAL_SERVER_ERROR)


def _log_api_error(err: APIError) -> None:
    # 4xx -> warning; 5xx -> error
    level = log.error if err.status_code >= 500 else log.warning
    level(
        "APIError: status=%s msg=%s request_id=%s",
        err.status_code,
        err.message,
        ensure_request_id(),
    )


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Notes
    -----
    - Guarantees the error envelope for all handled errors.
    - Service errors are translated by
      :func:`accounts.services._shared.base.translate_exception`.
    - Emits 5xx with ``exc_info`` for traceability; 4xx as warnings.
    """
    from accounts.services._shared.base import translate_exception

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        _log_api_error(err)
        return _envelope_response(err.to_envelope())

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        api_err = translate_exception(err)
        _log_api_error(api_err)
        if api_err.status_code >= 500:
            log.error("ServiceError: %s", type(err).__name__, exc_info=err)
        return _envelope_response(api_err.to_envelope())

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        # Werkzeug may provide HTML-ish description; normalize for clients
        message = (err.description or HTTPStatus(status).phrase).strip()
        if status == HTTPStatus.NOT_FOUND and request:
            message = f"Route '{request.path}' not found"
        level = log.error if status >= 500 else log.warning
        level(
            "HTTPException: status=%s detail=%s request_id=%s",
            status,
            message,
            ensure_request_id(),
        )
        resp = _envelope_response(_as_envelope(status=status, message=message))
        # Keep Retry-After and friends from werkzeug (e.g. 429 from the limiter)
        for header, value in err.get_headers():
            if header.lower() != "content-type":
                resp.headers.setdefault(header, value)
        return resp

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        messages = err.normalized_messages()
        errors = [{"field": key, "messages": value} for key, value in messages.items()]
        log.warning("ValidationError: request_id=%s", ensure_request_id())
        return _envelope_response(
            _as_envelope(status=HTTPStatus.BAD_REQUEST, message="Validation failed", errors=errors)
        )

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        # Do not leak raw DB error to clients
        log.error("IntegrityError: request_id=%s", ensure_request_id(), exc_info=True)
        return _envelope_response(
            _as_envelope(status=HTTPStatus.CONFLICT, message="Resource conflict")
        )

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        # E.g., transient DB connectivity, deadlocks, etc.
        log.error("OperationalError: request_id=%s", ensure_request_id(), exc_info=True)
        return _envelope_response(
            _as_envelope(
                status=HTTPStatus.SERVICE_UNAVAILABLE,
                message="Service temporarily unavailable",
            )
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        # Unexpected server-side error; never leak internal details
        log.error("Unhandled exception: request_id=%s", ensure_request_id(), exc_info=True)
        return _envelope_response(
            _as_envelope(status=HTTPStatus.INTERNAL_SERVER_ERROR, message="Unexpected error")
        )
