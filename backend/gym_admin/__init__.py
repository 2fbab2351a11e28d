"""Gym front-desk administration backend.

Membership plans, member enrollment, and payment records on top of a
relational store, with the membership lifecycle rules kept in
``gym_admin.domain``.
"""

__version__ = "0.1.0"
