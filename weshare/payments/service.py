import logging
from typing import List, Tuple

from sqlalchemy.orm import Session, joinedload

from weshare.auth.service import UserService
from weshare.exceptions import Conflict, Forbidden, NotFound, PolicyViolation
from weshare.ledger import BookingStatus
from weshare.models import Booking, Payment, User
from weshare.payments import mobile_money
from weshare.payments.schemas import PaymentCreate, PaymentStatus

logger = logging.getLogger(__name__)

class PaymentService:
    """Mobile-money payment of confirmed carpool bookings"""

    def __init__(self, db: Session):
        self.db = db

    def process_payment(self, user: User, request: PaymentCreate) -> Tuple[Payment, str]:
        """Charge the passenger for a confirmed booking, returning the payment and gateway message"""
        phone = UserService.normalize_and_validate_phone(request.phone)

        booking = (
            self.db.query(Booking)
            .options(joinedload(Booking.trip))
            .filter(Booking.id == request.booking_id)
            .with_for_update(of=Booking)
            .first()
        )
        if not booking:
            raise NotFound("Booking not found")
        if booking.user_id != user.id:
            raise Forbidden("You can only pay for your own bookings")
        if booking.status != BookingStatus.CONFIRMED.value:
            raise Conflict("Only confirmed bookings can be paid")

        already_paid = self.db.query(Payment.id).filter(
            Payment.booking_id == booking.id,
            Payment.status == PaymentStatus.COMPLETED.value,
        ).first()
        if already_paid:
            raise Conflict("Booking already paid")

        amount = booking.trip.price * booking.seats
        result = mobile_money.charge(phone, amount, request.method, reference=f"BOOKING-{booking.id}")
        settled = result.success and bool(result.transaction_id) and mobile_money.verify(result.transaction_id)
        failure = result.message if not result.success else "Payment could not be verified with the provider"

        payment = Payment(
            booking_id=booking.id,
            user_id=user.id,
            amount=amount,
            method=request.method.value,
            status=PaymentStatus.COMPLETED.value if settled else PaymentStatus.FAILED.value,
            transaction_id=result.transaction_id,
        )
        self.db.add(payment)
        self.db.commit()
        self.db.refresh(payment)

        if not settled:
            logger.warning("Payment for booking %s failed: %s", booking.id, failure)
            raise PolicyViolation(failure)

        logger.info("Booking %s paid: RWF %s (%s)", booking.id, amount, payment.transaction_id)
        return payment, result.message

    def list_my_payments(self, user: User) -> List[Payment]:
        return (
            self.db.query(Payment)
            .filter(Payment.user_id == user.id)
            .order_by(Payment.created_at.desc(), Payment.id.desc())
            .all()
        )
