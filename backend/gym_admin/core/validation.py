"""
Form validation helpers shared by the front-desk services.

A validator walks the whole submitted form, records every problem in a
``ValidationResult`` and keeps the converted values in ``cleaned_data``.
Services check ``is_valid`` before issuing any store call.
"""

import logging
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from .exceptions import ValidationError

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
# "1.234,56" style: dots group thousands, the comma is the decimal mark
_GROUPED_COMMA_DECIMAL = re.compile(r"^-?\d{1,3}(\.\d{3})+,\d+$")
_TRUE_WORDS = ("true", "1", "yes", "on")
_FALSE_WORDS = ("false", "0", "no", "off")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class ValidationResult:
    """Errors, warnings and converted values of one validation pass."""

    def __init__(self):
        self.errors: List[str] = []
        self.warnings: List[str] = []
        self.cleaned_data: Dict[str, Any] = {}
        self.first_field: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add_error(self, message: str, field: Optional[str] = None):
        if not self.errors:
            self.first_field = field
        entry = f"{field}: {message}" if field else message
        self.errors.append(entry)
        logger.debug("Rejected form field", extra={"context": {"error": entry}})

    def add_warning(self, message: str, field: Optional[str] = None):
        self.warnings.append(f"{field}: {message}" if field else message)

    def to_error(self) -> ValidationError:
        """All collected errors as one ValidationError, keyed on the first field."""
        message = "; ".join(self.errors) or "Invalid input"
        return ValidationError(message, field=self.first_field, errors=self.errors)


class BaseValidator:
    """Conversion helpers. Each returns the converted value or None."""

    def validate(self, data: Dict[str, Any]) -> ValidationResult:  # pragma: no cover
        raise NotImplementedError("Subclasses must implement validate")

    @staticmethod
    def validate_required_field(
        value: Any, field_name: str, result: ValidationResult
    ) -> bool:
        if _is_blank(value):
            result.add_error(f"{field_name} is required", field_name)
            return False
        return True

    @staticmethod
    def validate_date(
        value: Any, field_name: str, result: ValidationResult
    ) -> Optional[date]:
        """Accept date/datetime objects or ``YYYY-MM-DD`` text; blank is None."""
        if _is_blank(value):
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        try:
            return datetime.strptime(str(value).strip(), DATE_FORMAT).date()
        except ValueError:
            result.add_error("Invalid date. Use format YYYY-MM-DD", field_name)
            return None

    @staticmethod
    def validate_decimal(
        value: Any,
        field_name: str,
        result: ValidationResult,
        min_value: Optional[Decimal] = None,
        max_value: Optional[Decimal] = None,
    ) -> Optional[Decimal]:
        """
        Money input. Text may use either separator: ``12,5``, ``12.50`` and
        ``1.234,56`` are all understood.
        """
        if _is_blank(value):
            return None

        amount: Optional[Decimal] = None
        if isinstance(value, Decimal):
            amount = value
        elif isinstance(value, (int, float, str)) and not isinstance(value, bool):
            text = str(value).replace(" ", "").strip()
            if _GROUPED_COMMA_DECIMAL.match(text):
                text = text.replace(".", "").replace(",", ".")
            elif "," in text and "." not in text:
                text = text.replace(",", ".")
            try:
                amount = Decimal(text)
            except InvalidOperation:
                amount = None

        if amount is None or not amount.is_finite():
            result.add_error("Invalid amount. Use a numeric value", field_name)
            return None
        if min_value is not None and amount < min_value:
            result.add_error(f"Value must be at least {min_value}", field_name)
            return None
        if max_value is not None and amount > max_value:
            result.add_error(f"Value must be at most {max_value}", field_name)
            return None
        return amount

    @staticmethod
    def validate_integer(
        value: Any,
        field_name: str,
        result: ValidationResult,
        min_value: Optional[int] = None,
        max_value: Optional[int] = None,
    ) -> Optional[int]:
        if _is_blank(value):
            return None

        number: Optional[int] = None
        if isinstance(value, int) and not isinstance(value, bool):
            number = value
        elif isinstance(value, float) and value.is_integer():
            number = int(value)
        elif isinstance(value, str) and re.fullmatch(r"-?\d+", value.strip()):
            number = int(value.strip())

        if number is None:
            result.add_error("Value must be a whole number", field_name)
            return None
        if min_value is not None and number < min_value:
            result.add_error(f"Value must be at least {min_value}", field_name)
            return None
        if max_value is not None and number > max_value:
            result.add_error(f"Value must be at most {max_value}", field_name)
            return None
        return number

    @staticmethod
    def validate_string(
        value: Any,
        field_name: str,
        result: ValidationResult,
        min_length: Optional[int] = None,
        max_length: Optional[int] = None,
        allowed_values: Optional[List[str]] = None,
    ) -> Optional[str]:
        """Trimmed text, or None when blank."""
        if value is None:
            return None
        text = str(value).strip()

        if min_length is not None and len(text) < min_length:
            result.add_error(f"Must have at least {min_length} characters", field_name)
            return None
        if max_length is not None and len(text) > max_length:
            result.add_error(f"Must have at most {max_length} characters", field_name)
            return None
        if allowed_values is not None and text not in allowed_values:
            result.add_error(f"Value must be one of: {', '.join(allowed_values)}", field_name)
            return None
        return text or None

    @staticmethod
    def validate_email(
        value: Any, field_name: str, result: ValidationResult
    ) -> Optional[str]:
        """Shape check only; e-mail uniqueness is a convention, not enforced."""
        if _is_blank(value):
            return None
        email = str(value).strip()
        local, at, domain = email.partition("@")
        if not at or not local or not domain or any(c.isspace() for c in email):
            result.add_error("Invalid email format", field_name)
            return None
        return email

    @staticmethod
    def validate_boolean(
        value: Any, field_name: str, result: ValidationResult
    ) -> Optional[bool]:
        """Checkbox and JSON flags: true/false, 1/0, yes/no, on/off; blank is None."""
        if _is_blank(value):
            return None
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_WORDS:
            return True
        if text in _FALSE_WORDS:
            return False
        result.add_error("Value must be true or false", field_name)
        return None
