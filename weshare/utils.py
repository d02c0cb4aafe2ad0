from datetime import date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo
import re

import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberFormat

from weshare.config import settings

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def city_timezone() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def local_now() -> datetime:
    """Current time in the service's city timezone"""
    return datetime.now(city_timezone())


def parse_wall_clock(value: str) -> time:
    """Parse an HH:MM wall-clock string"""
    match = TIME_PATTERN.match(value.strip())
    if not match:
        raise ValueError("Time must be in HH:MM format")
    return time(int(match.group(1)), int(match.group(2)))


def departure_at(trip_date: date, trip_time: str) -> datetime:
    """Combine a trip's date and city-local wall-clock time into one instant"""
    return datetime.combine(trip_date, parse_wall_clock(trip_time), tzinfo=city_timezone())


def hours_until(moment: datetime, now: Optional[datetime] = None) -> float:
    now = now or local_now()
    return (moment - now) / timedelta(hours=1)


def normalize_phone_number(phone: str) -> str:
    """Return the E.164 form (+250XXXXXXXXX) of a local or international number"""
    try:
        parsed = phonenumbers.parse(phone, settings.PHONE_REGION)
        return phonenumbers.format_number(parsed, PhoneNumberFormat.E164)
    except NumberParseException:
        cleaned = re.sub(r"\D", "", phone)
        if cleaned.startswith("250"):
            return f"+{cleaned}"
        if cleaned.startswith("0"):
            return f"+250{cleaned[1:]}"
        return phone


def is_valid_phone_number(phone: str) -> bool:
    """True when the number is valid and belongs to the configured country"""
    try:
        parsed = phonenumbers.parse(phone, settings.PHONE_REGION)
    except NumberParseException:
        return False
    return (
        phonenumbers.is_valid_number(parsed)
        and phonenumbers.region_code_for_number(parsed) == settings.PHONE_REGION
    )
