"""
Payment controller: record payments and browse the ledger.
"""

import logging

from flask import Blueprint, request

from ..core.api_utils import (
    api_response,
    error_response,
    open_record_store,
    register_error_handlers,
    request_data,
)
from ..repositories.member_repo import MemberRepository
from ..repositories.payment_repo import PaymentRepository
from ..schemas.dtos import payment_to_dict
from ..services.payment_service import PaymentService

logger = logging.getLogger(__name__)

payments_bp = Blueprint("payments", __name__, url_prefix="/payments")
register_error_handlers(payments_bp)


def _ledger(store) -> PaymentService:
    return PaymentService(PaymentRepository(store), MemberRepository(store))


@payments_bp.route("/", methods=["GET"])
def list_payments():
    with open_record_store() as store:
        payments = _ledger(store).list_payments(
            request.args.get("q"), request.args.get("status")
        )
    return api_response(
        True, f"{len(payments)} payment(s)", [payment_to_dict(p) for p in payments]
    )


@payments_bp.route("/", methods=["POST"])
def record_payment():
    data = request_data()
    with open_record_store() as store:
        result = _ledger(store).record(
            member_id=data.get("member_id"),
            amount=data.get("amount"),
            method=data.get("payment_method") or data.get("method"),
            payment_date=data.get("payment_date"),
            status=data.get("status") or "Completed",
        )
    if not result.ok:
        return error_response(result.error)
    return api_response(True, "Payment recorded", payment_to_dict(result.payment), 201)


@payments_bp.route("/summary", methods=["GET"])
def payment_summary():
    """Revenue totals for the payments page header."""
    with open_record_store() as store:
        summary = _ledger(store).summary()
    return api_response(True, "Payment summary", summary.to_dict())
