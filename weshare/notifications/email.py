"""
Outbound e-mail.

There is no provider wired up yet: `send_email` logs the message and reports
success, so callers can already be written against the final interface.
"""

import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)


def send_email(to: str, subject: str, html: str) -> bool:
    logger.info("Email to %s: %s", to, subject)
    logger.debug("Email body for %s:\n%s", to, html)
    return True


def _trip_lines(trip: Dict[str, Any]) -> str:
    return (
        f"<p>Route: {trip['depart_city']} &rarr; {trip['destination_city']}</p>"
        f"<p>Date: {trip['date']}</p>"
        f"<p>Time: {trip['time']}</p>"
    )


def send_booking_confirmation_email(to: str, driver_name: str, trip: Dict[str, Any]) -> bool:
    return send_email(
        to,
        "Booking Confirmed - WeShare",
        f"<h2>Your booking has been confirmed!</h2><p>Driver: {driver_name}</p>{_trip_lines(trip)}",
    )


def send_payment_receipt_email(to: str, amount: int, transaction_id: str) -> bool:
    return send_email(
        to,
        "Payment Receipt - WeShare",
        f"<h2>Payment Receipt</h2><p>Amount: RWF {amount:,}</p>"
        f"<p>Transaction ID: {transaction_id}</p><p>Thank you for using WeShare!</p>",
    )


def send_trip_reminder_email(to: str, trip: Dict[str, Any]) -> bool:
    return send_email(
        to,
        "Trip Reminder - WeShare",
        f"<h2>Reminder: Your trip is tomorrow!</h2>{_trip_lines(trip)}<p>Please be ready on time!</p>",
    )
