"""
Health controller - health check endpoint for monitoring.
"""

import logging

from flask import Blueprint
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .. import __version__
from ..core.api_utils import api_response
from ..db.session import get_engine

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__)


@health_bp.route("/health", methods=["GET"])
def health_check():
    """
    Report whether the database answers a trivial query.

    Status codes:
        200: database reachable
        503: database unreachable
    """
    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(
            "Health check: database unreachable",
            extra={"context": {"endpoint": "/health", "error": str(e)}},
        )
        return api_response(
            False, "Database unreachable", {"version": __version__}, 503
        )

    return api_response(True, "healthy", {"version": __version__, "database": "ok"})
