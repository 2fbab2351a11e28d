"""
Payment ledger service.

Payments are recorded as facts: nothing here charges a card, and a
recorded payment is never edited or removed.

``record`` returns a ``PaymentRecordResult``. The read operations
(``list_payments``, ``summary``) raise instead: ``ValidationError`` for an
unknown status filter, ``RepositoryError`` from the store.
"""

import logging
from collections import Counter
from datetime import date
from decimal import Decimal
from typing import List, Optional

from ..core import config
from ..core.exceptions import NotFoundError, RepositoryError, ValidationError
from ..core.validation import BaseValidator, ValidationResult
from ..domain.entities import Payment, PaymentMethod, PaymentStatus
from ..domain.interfaces import IMemberReader, IPaymentRepository
from ..schemas.dtos import PaymentRecordResult, PaymentSummary

logger = logging.getLogger(__name__)


class PaymentValidator(BaseValidator):
    """Validator for the record-payment form."""

    ALLOWED_PAYMENT_METHODS = [method.value for method in PaymentMethod]
    ALLOWED_STATUSES = [status.value for status in PaymentStatus]

    def validate(self, data) -> ValidationResult:
        result = ValidationResult()

        self.validate_required_field(data.get("member_id"), "member_id", result)
        self.validate_required_field(data.get("amount"), "amount", result)
        self.validate_required_field(data.get("method"), "method", result)

        if data.get("member_id"):
            result.cleaned_data["member_id"] = str(data["member_id"]).strip()

        amount = self.validate_decimal(
            data.get("amount"), "amount", result, min_value=Decimal("0.01")
        )
        if amount is not None:
            result.cleaned_data["amount"] = amount

        method = self.validate_string(
            data.get("method"),
            "method",
            result,
            allowed_values=self.ALLOWED_PAYMENT_METHODS,
        )
        if method:
            result.cleaned_data["method"] = PaymentMethod(method)

        status = self.validate_string(
            data.get("status") or PaymentStatus.COMPLETED.value,
            "status",
            result,
            allowed_values=self.ALLOWED_STATUSES,
        )
        if status:
            result.cleaned_data["status"] = PaymentStatus(status)

        payment_date = self.validate_date(data.get("payment_date"), "payment_date", result)
        if payment_date:
            result.cleaned_data["payment_date"] = payment_date

        return result


class PaymentService:
    """Application service for recording and summarizing payments."""

    def __init__(
        self, payment_repo: IPaymentRepository, member_repo: IMemberReader
    ) -> None:
        self.payment_repo = payment_repo
        self.member_repo = member_repo
        self.validator = PaymentValidator()

    def record(
        self,
        member_id: str,
        amount,
        method,
        payment_date=None,
        status=PaymentStatus.COMPLETED,
        today: Optional[date] = None,
    ) -> PaymentRecordResult:
        """Record a payment for an existing member."""
        validation = self.validator.validate(
            {
                "member_id": member_id,
                "amount": amount,
                "method": getattr(method, "value", method),
                "status": getattr(status, "value", status),
                "payment_date": payment_date,
            }
        )
        if not validation.is_valid:
            return PaymentRecordResult(error=validation.to_error())

        cleaned = validation.cleaned_data
        try:
            if self.member_repo.get_by_id(cleaned["member_id"]) is None:
                return PaymentRecordResult(
                    error=NotFoundError(
                        f"Member {cleaned['member_id']} not found", field="member_id"
                    )
                )
            payment = self.payment_repo.create(
                Payment(
                    member_id=cleaned["member_id"],
                    amount=cleaned["amount"],
                    payment_date=cleaned.get("payment_date") or today or config.today(),
                    method=cleaned["method"],
                    status=cleaned["status"],
                )
            )
        except RepositoryError as e:
            logger.error(
                "Payment recording failed",
                extra={"context": {"member_id": member_id, "error": e.message}},
            )
            return PaymentRecordResult(error=e)

        logger.info(
            "Payment recorded",
            extra={
                "context": {
                    "payment_id": payment.id,
                    "member_id": payment.member_id,
                    "amount": str(payment.amount),
                    "status": payment.status.value,
                }
            },
        )
        return PaymentRecordResult(payment=payment)

    def list_payments(
        self, term: Optional[str] = None, status: Optional[str] = None
    ) -> List[Payment]:
        """Payments newest first, filtered by member name and status."""
        wanted = None
        if status and status != "All":
            try:
                wanted = PaymentStatus(status)
            except ValueError:
                raise ValidationError(f"Unknown status '{status}'", field="status") from None

        payments = self.payment_repo.list_all()
        needle = (term or "").strip().lower()
        if needle:
            names = {m.id: m.full_name.lower() for m in self.member_repo.list_all()}
            payments = [p for p in payments if needle in names.get(p.member_id, "")]
        if wanted is not None:
            payments = [p for p in payments if p.status == wanted]
        return payments

    def summary(self) -> PaymentSummary:
        """Completed revenue, pending amount and counts per status."""
        payments = self.payment_repo.list_all()
        return PaymentSummary(
            total_revenue=sum(
                (p.amount for p in payments if p.status == PaymentStatus.COMPLETED),
                Decimal("0"),
            ),
            pending_amount=sum(
                (p.amount for p in payments if p.status == PaymentStatus.PENDING),
                Decimal("0"),
            ),
            count_by_status=dict(Counter(p.status.value for p in payments)),
        )
