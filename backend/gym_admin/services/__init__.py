# Services package initialization
# Application services: each one receives its repositories explicitly

from .enrollment_service import EnrollmentService
from .member_directory_service import MemberDirectoryService
from .payment_service import PaymentService
from .plan_catalog_service import PlanCatalogService

__all__ = [
    "EnrollmentService",
    "MemberDirectoryService",
    "PaymentService",
    "PlanCatalogService",
]
