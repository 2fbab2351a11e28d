"""
Member controller for handling HTTP requests.

Enrollment may end in a partial success: the member row exists but the
plan assignment failed. That case answers 207 with the member payload so
the front desk can assign the plan from the member's page.
"""

import logging

from flask import Blueprint, current_app, request

from ..core import config
from ..core.api_utils import (
    api_response,
    error_response,
    open_record_store,
    register_error_handlers,
    request_data,
)
from ..repositories.member_repo import MemberRepository
from ..repositories.payment_repo import PaymentRepository
from ..repositories.plan_repo import PlanRepository
from ..schemas.dtos import MemberDraft, assignment_to_dict, member_to_dict
from ..services.enrollment_service import EnrollmentService
from ..services.member_directory_service import MemberDirectoryService

logger = logging.getLogger(__name__)

members_bp = Blueprint("members", __name__, url_prefix="/members")
register_error_handlers(members_bp)


def _directory(store) -> MemberDirectoryService:
    return MemberDirectoryService(
        MemberRepository(store),
        PlanRepository(store),
        PaymentRepository(store),
        threshold_days=current_app.config.get(
            "EXPIRING_THRESHOLD_DAYS", config.EXPIRING_THRESHOLD_DAYS
        ),
        grace_days=current_app.config.get("PAYMENT_GRACE_DAYS", config.PAYMENT_GRACE_DAYS),
    )


def _enrollment(store) -> EnrollmentService:
    return EnrollmentService(MemberRepository(store), PlanRepository(store))


@members_bp.route("/", methods=["GET"])
def list_members():
    """Members page: optional ``q`` search term and ``status`` filter."""
    with open_record_store() as store:
        rows = _directory(store).search(request.args.get("q"), request.args.get("status"))
    return api_response(True, f"{len(rows)} member(s)", [row.to_dict() for row in rows])


@members_bp.route("/", methods=["POST"])
def enroll_member():
    data = request_data()
    draft = MemberDraft.from_dict(data)
    with open_record_store() as store:
        result = _enrollment(store).enroll(
            draft, data.get("plan_id"), start_date=data.get("start_date")
        )

    if result.is_partial:
        return error_response(result.error, {"member": member_to_dict(result.member)})
    if not result.ok:
        return error_response(result.error)
    return api_response(
        True,
        "Member added",
        {
            "member": member_to_dict(result.member),
            "assignment": assignment_to_dict(result.assignment),
        },
        201,
    )


@members_bp.route("/expiring", methods=["GET"])
def expiring_members():
    """Members whose membership ends within the expiring window."""
    with open_record_store() as store:
        rows = _directory(store).expiring()
    return api_response(True, f"{len(rows)} expiring member(s)", [r.to_dict() for r in rows])


@members_bp.route("/<member_id>/assignments", methods=["POST"])
def assign_plan(member_id):
    data = request_data()
    with open_record_store() as store:
        result = _enrollment(store).assign_plan(
            member_id, data.get("plan_id"), start_date=data.get("start_date")
        )
    if not result.ok:
        return error_response(result.error)
    return api_response(
        True,
        "Plan assigned",
        {
            "assignment": assignment_to_dict(result.assignment),
            "deactivated": [assignment_to_dict(a) for a in result.deactivated],
        },
        201,
    )


@members_bp.route("/<member_id>", methods=["PUT"])
def update_member(member_id):
    with open_record_store() as store:
        result = _directory(store).update_member(member_id, request_data())
    if not result.ok:
        return error_response(result.error)
    return api_response(True, "Member updated", member_to_dict(result.member))


@members_bp.route("/<member_id>", methods=["DELETE"])
def delete_member(member_id):
    with open_record_store() as store:
        result = _directory(store).delete_member(member_id)
    if not result.ok:
        return error_response(result.error)
    return api_response(True, "Member deleted", {"id": member_id})
