"""Plan repository: maps ``membership_plans`` rows to Plan entities."""

from typing import List, Optional

from ..domain.entities import Plan
from ..domain.interfaces import IPlanRepository, IRecordStore, Row
from ._mapping import as_datetime, as_decimal, as_str_list

TABLE = "membership_plans"


class PlanRepository(IPlanRepository):
    """Repository for Plan persistence operations."""

    def __init__(self, store: IRecordStore) -> None:
        self.store = store

    def get_by_id(self, plan_id: str) -> Optional[Plan]:
        rows = self.store.query(TABLE, {"id": plan_id})
        return self._to_domain(rows[0]) if rows else None

    def list_all(self, active_only: bool = False) -> List[Plan]:
        filters = {"is_active": True} if active_only else None
        rows = self.store.query(TABLE, filters, order_by=["name"])
        return [self._to_domain(row) for row in rows]

    def create(self, plan: Plan) -> Plan:
        inserted = self.store.insert(TABLE, [self._to_row(plan)])
        return self._to_domain(inserted[0])

    def update(self, plan: Plan) -> Plan:
        if not plan.id:
            raise ValueError("Plan ID is required for update")
        row = self._to_row(plan)
        row.pop("id")
        return self._to_domain(self.store.update(TABLE, plan.id, row))

    def delete(self, plan_id: str) -> None:
        self.store.delete(TABLE, plan_id)

    @staticmethod
    def _to_row(plan: Plan) -> Row:
        return {
            "id": plan.id,
            "name": plan.name,
            "price": plan.price,
            "duration_months": plan.duration_months,
            "description": plan.description,
            "features": list(plan.features),
            "is_active": plan.is_active,
        }

    @staticmethod
    def _to_domain(row: Row) -> Plan:
        """Convert a store row to a domain entity."""
        is_active = row.get("is_active")
        return Plan(
            id=row.get("id"),
            name=row.get("name") or "",
            price=as_decimal(row.get("price")),
            duration_months=int(row.get("duration_months") or 1),
            features=as_str_list(row.get("features")),
            description=row.get("description"),
            is_active=True if is_active is None else bool(is_active),
            created_at=as_datetime(row.get("created_at")),
        )
