"""Member repository.

Covers both the ``members`` table and the ``member_memberships`` table that
links members to plans.
"""

from typing import List, Optional

from ..domain.entities import Member, MembershipAssignment
from ..domain.interfaces import IMemberRepository, IRecordStore, Row
from ._mapping import as_date, as_datetime

MEMBERS = "members"
ASSIGNMENTS = "member_memberships"


class MemberRepository(IMemberRepository):
    """Repository for Member and MembershipAssignment persistence."""

    def __init__(self, store: IRecordStore) -> None:
        self.store = store

    def get_by_id(self, member_id: str) -> Optional[Member]:
        rows = self.store.query(MEMBERS, {"id": member_id})
        return self._to_domain(rows[0]) if rows else None

    def list_all(self) -> List[Member]:
        rows = self.store.query(MEMBERS, order_by=["created_at"])
        return [self._to_domain(row) for row in rows]

    def create(self, member: Member) -> Member:
        inserted = self.store.insert(MEMBERS, [self._to_row(member)])
        return self._to_domain(inserted[0])

    def update(self, member: Member) -> Member:
        if not member.id:
            raise ValueError("Member ID is required for update")
        row = self._to_row(member)
        row.pop("id")
        return self._to_domain(self.store.update(MEMBERS, member.id, row))

    def delete(self, member_id: str) -> None:
        self.store.delete(MEMBERS, member_id)

    def list_assignments(
        self,
        member_id: Optional[str] = None,
        plan_id: Optional[str] = None,
        active_only: bool = False,
    ) -> List[MembershipAssignment]:
        filters = {}
        if member_id is not None:
            filters["member_id"] = member_id
        if plan_id is not None:
            filters["membership_plan_id"] = plan_id
        if active_only:
            filters["is_active"] = True
        rows = self.store.query(ASSIGNMENTS, filters, order_by=["-start_date"])
        return [self._assignment_to_domain(row) for row in rows]

    def create_assignment(
        self, assignment: MembershipAssignment
    ) -> MembershipAssignment:
        row = {
            "id": assignment.id,
            "member_id": assignment.member_id,
            "membership_plan_id": assignment.plan_id,
            "start_date": assignment.start_date,
            "end_date": assignment.end_date,
            "is_active": assignment.is_active,
        }
        inserted = self.store.insert(ASSIGNMENTS, [row])
        return self._assignment_to_domain(inserted[0])

    def deactivate_assignment(self, assignment_id: str) -> MembershipAssignment:
        row = self.store.update(ASSIGNMENTS, assignment_id, {"is_active": False})
        return self._assignment_to_domain(row)

    @staticmethod
    def _to_row(member: Member) -> Row:
        return {
            "id": member.id,
            "first_name": member.first_name,
            "last_name": member.last_name,
            "email": member.email,
            "phone": member.phone,
            "address": member.address,
            "emergency_contact_name": member.emergency_contact_name,
            "emergency_contact_phone": member.emergency_contact_phone,
            "notes": member.notes,
        }

    @staticmethod
    def _to_domain(row: Row) -> Member:
        """Convert a store row to a domain entity."""
        return Member(
            id=row.get("id"),
            first_name=row.get("first_name") or "",
            last_name=row.get("last_name") or "",
            email=row.get("email") or "",
            phone=row.get("phone"),
            address=row.get("address"),
            emergency_contact_name=row.get("emergency_contact_name"),
            emergency_contact_phone=row.get("emergency_contact_phone"),
            notes=row.get("notes"),
            created_at=as_datetime(row.get("created_at")),
        )

    @staticmethod
    def _assignment_to_domain(row: Row) -> MembershipAssignment:
        is_active = row.get("is_active")
        return MembershipAssignment(
            id=row.get("id"),
            member_id=row.get("member_id") or "",
            plan_id=row.get("membership_plan_id") or "",
            start_date=as_date(row.get("start_date")),
            end_date=as_date(row.get("end_date")),
            is_active=True if is_active is None else bool(is_active),
        )
