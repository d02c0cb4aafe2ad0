import logging
from typing import Dict, List, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from weshare.exceptions import Conflict, Forbidden, NotFound, ValidationError
from weshare.ledger import BookingStatus
from weshare.models import Booking, Message, Trip, User

logger = logging.getLogger(__name__)

class MessageService:
    """Messages between a passenger and the driver of a confirmed booking"""

    def __init__(self, db: Session):
        self.db = db

    def _conversation(self, booking_id: int, user: User) -> Tuple[Booking, int]:
        """Return the booking and the id of the other party"""
        booking = (
            self.db.query(Booking)
            .options(joinedload(Booking.trip))
            .filter(Booking.id == booking_id)
            .first()
        )
        if not booking:
            raise NotFound("Booking not found")

        driver_id = booking.trip.driver_id
        if user.id not in (booking.user_id, driver_id):
            raise Forbidden("You are not part of this booking")
        if booking.status != BookingStatus.CONFIRMED.value:
            raise Conflict("Messaging only available for confirmed bookings")

        other_id = driver_id if user.id == booking.user_id else booking.user_id
        return booking, other_id

    def list_messages(self, booking_id: int, user: User) -> List[Message]:
        self._conversation(booking_id, user)
        return (
            self.db.query(Message)
            .options(joinedload(Message.sender), joinedload(Message.receiver))
            .filter(Message.booking_id == booking_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
            .all()
        )

    def send_message(self, booking_id: int, user: User, content: str) -> Message:
        text = (content or "").strip()
        if not text:
            raise ValidationError(
                "Message content is required",
                details=[{"field": "content", "message": "Message cannot be empty"}],
            )
        booking, receiver_id = self._conversation(booking_id, user)

        message = Message(booking_id=booking.id, sender_id=user.id, receiver_id=receiver_id, content=text)
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)
        logger.debug("User %s sent message %s on booking %s", user.id, message.id, booking.id)
        return message

    def mark_read(self, booking_id: int, user: User) -> int:
        """Flag the caller's unread messages on a booking, returning how many changed"""
        self._conversation(booking_id, user)
        updated = (
            self.db.query(Message)
            .filter(
                Message.booking_id == booking_id,
                Message.receiver_id == user.id,
                Message.read.is_(False),
            )
            .update({Message.read: True}, synchronize_session=False)
        )
        self.db.commit()
        return updated

    def unread_counts(self, user: User) -> Dict[int, int]:
        """Unread message count per confirmed booking the user takes part in"""
        rows = (
            self.db.query(Message.booking_id, func.count(Message.id))
            .join(Booking, Message.booking_id == Booking.id)
            .join(Trip, Booking.trip_id == Trip.id)
            .filter(
                Message.receiver_id == user.id,
                Message.read.is_(False),
                Booking.status == BookingStatus.CONFIRMED.value,
                or_(Booking.user_id == user.id, Trip.driver_id == user.id),
            )
            .group_by(Message.booking_id)
            .all()
        )
        return {booking_id: count for booking_id, count in rows}
