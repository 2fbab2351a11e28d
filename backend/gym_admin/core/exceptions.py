"""
Custom exceptions for the application.

Services never raise these to their callers: they are carried inside the
result objects returned by each operation so the HTTP layer or the CLI can
render them. Repositories raise ``RepositoryError`` and services catch it.
"""

from typing import Any, List, Optional


class GymAdminError(Exception):
    """Base class for every error this package reports."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"type": type(self).__name__, "message": self.message}


class ValidationError(GymAdminError):
    """Caller-fixable input problem, detected before any I/O."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        errors: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.field = field
        self.errors = list(errors) if errors else [message]

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["field"] = self.field
        data["errors"] = self.errors
        return data


class NotFoundError(ValidationError):
    """The record an operation refers to does not exist."""


class RepositoryError(GymAdminError):
    """Wraps whatever the storage collaborator reported."""

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(message)
        self.table = table
        self.operation = operation

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["table"] = self.table
        data["operation"] = self.operation
        return data


class MemberCreationError(RepositoryError):
    """The member row could not be inserted; nothing was created."""


class AssignmentWarning(GymAdminError):
    """
    Partial success of an enrollment: the member row exists but the
    membership assignment could not be created. The member is not rolled
    back, the front desk has to assign the plan manually.
    """

    def __init__(self, message: str, member: Any = None, cause: Any = None):
        super().__init__(message)
        self.member = member
        self.cause = cause

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["member_id"] = getattr(self.member, "id", None)
        data["cause"] = str(self.cause) if self.cause is not None else None
        return data
