from datetime import date, datetime, time, timedelta

import pytest

from weshare.exceptions import Conflict, PolicyViolation
from weshare.ledger import ensure_lead_time, ensure_seats
from weshare.utils import city_timezone, departure_at, normalize_phone_number, parse_wall_clock


class TestEnsureSeats:
    def test_fits(self):
        assert ensure_seats(capacity=4, held=1, requested=3) == 3

    def test_fully_booked(self):
        with pytest.raises(Conflict) as exc:
            ensure_seats(capacity=4, held=4, requested=1)
        assert exc.value.message == "This trip is fully booked"

    def test_partial(self):
        with pytest.raises(Conflict) as exc:
            ensure_seats(capacity=4, held=2, requested=3)
        assert exc.value.message == "Only 2 seats available"


class TestLeadTime:
    now = datetime(2026, 3, 1, 12, 0, tzinfo=city_timezone())

    def test_departed(self):
        with pytest.raises(PolicyViolation) as exc:
            ensure_lead_time(self.now - timedelta(minutes=1), 1, "book", now=self.now)
        assert exc.value.message == "Cannot book a trip that has already departed"

    def test_inside_window(self):
        with pytest.raises(PolicyViolation) as exc:
            ensure_lead_time(self.now + timedelta(hours=20), 24, "cancel", now=self.now)
        assert exc.value.message == "Cannot cancel less than 24 hours before departure"

    def test_outside_window(self):
        ensure_lead_time(self.now + timedelta(hours=3), 2, "book", now=self.now)


class TestTimeAndPhone:
    def test_departure_is_city_local(self):
        moment = departure_at(date(2026, 3, 1), "07:30")
        assert moment.utcoffset() == timedelta(hours=2)
        assert moment.time() == time(7, 30)

    @pytest.mark.parametrize("value", ["7:30", "24:00", "07:60", "noon"])
    def test_rejects_bad_times(self, value):
        with pytest.raises(ValueError):
            parse_wall_clock(value)

    @pytest.mark.parametrize("raw", ["0788123456", "+250788123456", "250788123456", "0788 123 456"])
    def test_phone_formats(self, raw):
        assert normalize_phone_number(raw) == "+250788123456"
