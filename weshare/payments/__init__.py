"""
Payments Module

Mobile-money payment (MTN Mobile Money, Airtel Money) of confirmed carpool
bookings. The gateway in mobile_money.py is a placeholder that always
succeeds with a TXN-prefixed transaction id.

Key Components:
- mobile_money.py: gateway client
- service.py: PaymentService (one completed payment per booking)
- router.py: endpoints under /payments
"""

from .router import router
from .service import PaymentService
from .mobile_money import PaymentMethod
from .schemas import Payment, PaymentCreate, PaymentStatus

__all__ = [
    "router",
    "PaymentService",
    "PaymentMethod",
    "Payment",
    "PaymentCreate",
    "PaymentStatus",
]
