"""HTTP blueprints. Each request opens its own record store."""

from .health_controller import health_bp
from .member_controller import members_bp
from .payment_controller import payments_bp
from .plan_controller import plans_bp

__all__ = ["health_bp", "members_bp", "payments_bp", "plans_bp"]
