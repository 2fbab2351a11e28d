"""
Plan controller: the plan catalog page and the plan editor form.
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
from ..core.exceptions import NotFoundError
from ..repositories.member_repo import MemberRepository
from ..repositories.plan_repo import PlanRepository
from ..schemas.dtos import PlanDraft, plan_to_dict
from ..services.plan_catalog_service import PlanCatalogService

logger = logging.getLogger(__name__)

plans_bp = Blueprint("plans", __name__, url_prefix="/plans")
register_error_handlers(plans_bp)


def _catalog(store) -> PlanCatalogService:
    return PlanCatalogService(PlanRepository(store), MemberRepository(store))


@plans_bp.route("/", methods=["GET"])
def list_plans():
    """Plans with member counts and estimated monthly revenue."""
    active_only = request.args.get("active_only", "").lower() in ("1", "true", "yes")
    with open_record_store() as store:
        summaries = _catalog(store).list_plans(active_only=active_only)
    return api_response(
        True,
        f"{len(summaries)} plan(s)",
        [summary.to_dict() for summary in summaries],
    )


@plans_bp.route("/", methods=["POST"])
def create_plan():
    draft = PlanDraft.from_dict(request_data())
    with open_record_store() as store:
        result = _catalog(store).save(draft)
    if not result.ok:
        return error_response(result.error)
    return api_response(True, "Plan created", plan_to_dict(result.plan), 201)


@plans_bp.route("/<plan_id>/edit", methods=["GET"])
def edit_plan(plan_id):
    """Editor form values for a stored plan."""
    with open_record_store() as store:
        draft = _catalog(store).load_for_edit(plan_id)
    if draft is None:
        return error_response(NotFoundError(f"Plan {plan_id} not found", field="plan_id"))
    return api_response(True, "Plan loaded", {"id": plan_id, **draft.to_dict()})


@plans_bp.route("/<plan_id>", methods=["PUT"])
def update_plan(plan_id):
    """Save the editor form over an existing plan.

    A body holding only ``is_active`` toggles visibility without touching
    the other fields.
    """
    data = request_data()
    with open_record_store() as store:
        catalog = _catalog(store)
        if set(data) == {"is_active"}:
            result = catalog.set_active(plan_id, data["is_active"])
        else:
            result = catalog.save(PlanDraft.from_dict(data), plan_id=plan_id)
    if not result.ok:
        return error_response(result.error)
    return api_response(True, "Plan updated", plan_to_dict(result.plan))


@plans_bp.route("/<plan_id>", methods=["DELETE"])
def delete_plan(plan_id):
    with open_record_store() as store:
        result = _catalog(store).delete(plan_id)
    if not result.ok:
        return error_response(result.error)
    return api_response(True, "Plan deleted", {"id": plan_id})


@plans_bp.route("/preview", methods=["POST"])
def preview_plan_end_date():
    """End date a plan of the given duration would have if started today."""
    data = request_data()
    with open_record_store() as store:
        end_date = _catalog(store).preview_end_date(
            data.get("duration_value"), data.get("duration_unit")
        )
    return api_response(True, "Preview computed", {"end_date": end_date.isoformat()})
