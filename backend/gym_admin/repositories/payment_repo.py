"""Payment repository. Payments are appended, never changed."""

from typing import List

from ..domain.entities import Payment
from ..domain.interfaces import IPaymentRepository, IRecordStore, Row
from ._mapping import as_date, as_datetime, as_decimal

TABLE = "payments"
NEWEST_FIRST = ["-payment_date", "-created_at"]


class PaymentRepository(IPaymentRepository):
    """Repository for Payment persistence operations."""

    def __init__(self, store: IRecordStore) -> None:
        self.store = store

    def list_all(self) -> List[Payment]:
        rows = self.store.query(TABLE, order_by=NEWEST_FIRST)
        return [self._to_domain(row) for row in rows]

    def list_for_member(self, member_id: str) -> List[Payment]:
        rows = self.store.query(TABLE, {"member_id": member_id}, order_by=NEWEST_FIRST)
        return [self._to_domain(row) for row in rows]

    def create(self, payment: Payment) -> Payment:
        row = {
            "id": payment.id,
            "member_id": payment.member_id,
            "amount": payment.amount,
            "payment_date": payment.payment_date,
            "payment_method": payment.method.value,
            "status": payment.status.value,
        }
        inserted = self.store.insert(TABLE, [row])
        return self._to_domain(inserted[0])

    @staticmethod
    def _to_domain(row: Row) -> Payment:
        """Convert a store row to a domain entity."""
        return Payment(
            id=row.get("id"),
            member_id=row.get("member_id") or "",
            amount=as_decimal(row.get("amount")),
            payment_date=as_date(row.get("payment_date")),
            method=row.get("payment_method"),
            status=row.get("status") or "Completed",
            created_at=as_datetime(row.get("created_at")),
        )
