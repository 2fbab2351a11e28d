"""
Common API utilities for consistent response formatting across all controllers.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from flask import Blueprint, current_app, jsonify, request

from ..db.session import SessionLocal
from ..domain.interfaces import IRecordStore
from .exceptions import (
    AssignmentWarning,
    GymAdminError,
    NotFoundError,
    RepositoryError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def api_response(
    success: bool, message: str, data: Optional[Any] = None, status_code: int = 200
) -> tuple:
    """
    Standardized API response format for all endpoints.

    Args:
        success: Whether the operation was successful
        message: Human-readable message about the operation
        data: Optional data payload
        status_code: HTTP status code

    Returns:
        Tuple of (json_response, status_code)
    """
    response = {"success": success, "message": message}

    if data is not None:
        response["data"] = data

    return jsonify(response), status_code


def error_status(error: GymAdminError) -> int:
    """HTTP status for an error carried by a service result."""
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, AssignmentWarning):
        return 207
    if isinstance(error, RepositoryError):
        return 502
    return 500


def error_response(error: GymAdminError, data: Optional[Any] = None) -> tuple:
    payload = {"error": error.to_dict()}
    if data is not None:
        payload.update(data)
    return api_response(
        isinstance(error, AssignmentWarning), error.message, payload, error_status(error)
    )


def register_error_handlers(blueprint: Blueprint) -> None:
    """Answer service errors raised by a view with the JSON envelope.

    Read operations raise instead of returning a result object; a store
    failure there becomes a 502 and an unknown filter a 400.
    """

    @blueprint.errorhandler(GymAdminError)
    def _service_error(error: GymAdminError):
        logger.warning(
            "Request failed",
            extra={
                "context": {
                    "path": request.path,
                    "error_type": type(error).__name__,
                    "error": error.message,
                }
            },
        )
        return error_response(error)


def request_data() -> dict:
    """JSON body, falling back to form fields."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


@contextmanager
def open_record_store() -> Iterator[IRecordStore]:
    """Record store for one request.

    ``RECORD_STORE_FACTORY`` in the app config overrides the default
    SQLAlchemy store (used by tests to inject an in-memory store).
    """
    factory = current_app.config.get("RECORD_STORE_FACTORY")
    if factory is not None:
        yield factory()
        return

    from ..repositories.record_store import SqlAlchemyRecordStore

    db = SessionLocal()
    try:
        yield SqlAlchemyRecordStore(db)
    finally:
        db.close()
