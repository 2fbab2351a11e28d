# Repositories package: generic record stores and typed repositories on top of them

from .member_repo import MemberRepository
from .memory_store import InMemoryRecordStore
from .payment_repo import PaymentRepository
from .plan_repo import PlanRepository
from .record_store import SqlAlchemyRecordStore

__all__ = [
    "InMemoryRecordStore",
    "SqlAlchemyRecordStore",
    "MemberRepository",
    "PaymentRepository",
    "PlanRepository",
]
