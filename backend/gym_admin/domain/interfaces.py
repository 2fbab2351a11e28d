"""
Abstract interfaces for the store and the repositories following Interface
Segregation Principle.

``IRecordStore`` is the generic capability the hosted database offers
(query/insert/update/delete over named tables with dict rows). Repositories
sit on top of it and convert rows into domain entities, so services never
see a raw row.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from .entities import Member, MembershipAssignment, Payment, Plan

Row = Dict[str, Any]


class IRecordStore(ABC):
    """Generic table store. Every failure is raised as RepositoryError."""

    @abstractmethod
    def query(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[Sequence[str]] = None,
    ) -> List[Row]:
        """Rows of ``table`` whose columns equal every value in ``filters``.

        ``order_by`` entries are column names, prefixed with ``-`` for
        descending order.
        """
        pass

    @abstractmethod
    def insert(self, table: str, rows: List[Row]) -> List[Row]:
        """Insert rows and return them as stored (ids and defaults filled)."""
        pass

    @abstractmethod
    def update(self, table: str, record_id: str, patch: Row) -> Row:
        """Apply ``patch`` to one row and return the updated row."""
        pass

    @abstractmethod
    def delete(self, table: str, record_id: str) -> None:
        """Delete one row."""
        pass


class IPlanReader(ABC):
    """Interface for plan read operations."""

    @abstractmethod
    def get_by_id(self, plan_id: str) -> Optional[Plan]:
        """Get plan by ID."""
        pass

    @abstractmethod
    def list_all(self, active_only: bool = False) -> List[Plan]:
        """List plans, optionally only the active ones."""
        pass


class IPlanWriter(ABC):
    """Interface for plan write operations."""

    @abstractmethod
    def create(self, plan: Plan) -> Plan:
        """Create a new plan."""
        pass

    @abstractmethod
    def update(self, plan: Plan) -> Plan:
        """Update an existing plan."""
        pass

    @abstractmethod
    def delete(self, plan_id: str) -> None:
        """Delete a plan."""
        pass


class IPlanRepository(IPlanReader, IPlanWriter):
    """Complete plan repository interface."""

    pass


class IMemberReader(ABC):
    """Interface for member and assignment read operations."""

    @abstractmethod
    def get_by_id(self, member_id: str) -> Optional[Member]:
        """Get member by ID."""
        pass

    @abstractmethod
    def list_all(self) -> List[Member]:
        """List all members, oldest first."""
        pass

    @abstractmethod
    def list_assignments(
        self,
        member_id: Optional[str] = None,
        plan_id: Optional[str] = None,
        active_only: bool = False,
    ) -> List[MembershipAssignment]:
        """List assignments, newest start date first."""
        pass


class IMemberWriter(ABC):
    """Interface for member and assignment write operations."""

    @abstractmethod
    def create(self, member: Member) -> Member:
        """Create a new member."""
        pass

    @abstractmethod
    def update(self, member: Member) -> Member:
        """Update an existing member."""
        pass

    @abstractmethod
    def delete(self, member_id: str) -> None:
        """Delete a member."""
        pass

    @abstractmethod
    def create_assignment(
        self, assignment: MembershipAssignment
    ) -> MembershipAssignment:
        """Link a member to a plan."""
        pass

    @abstractmethod
    def deactivate_assignment(self, assignment_id: str) -> MembershipAssignment:
        """Clear the active flag of an assignment."""
        pass


class IMemberRepository(IMemberReader, IMemberWriter):
    """Complete member repository interface."""

    pass


class IPaymentReader(ABC):
    """Interface for payment read operations."""

    @abstractmethod
    def list_all(self) -> List[Payment]:
        """List payments, newest first."""
        pass

    @abstractmethod
    def list_for_member(self, member_id: str) -> List[Payment]:
        """List the payments of one member, newest first."""
        pass


class IPaymentWriter(ABC):
    """Interface for payment write operations. Payments are append-only."""

    @abstractmethod
    def create(self, payment: Payment) -> Payment:
        """Record a payment."""
        pass


class IPaymentRepository(IPaymentReader, IPaymentWriter):
    """Complete payment repository interface."""

    pass
