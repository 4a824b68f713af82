import datetime

from django.conf import settings
from django.utils import timezone


class Clock:
    """Wall clock in the booking region's fixed civil offset.

    Both the availability resolver and the booking workflow ask this object
    whether a slot has elapsed, so what a customer is shown and what the
    server accepts cannot disagree. No DST is modelled.
    """

    def __init__(self, offset_minutes=None, source=None):
        if offset_minutes is None:
            offset_minutes = settings.BOOKING_UTC_OFFSET_MINUTES
        self.tz = datetime.timezone(datetime.timedelta(minutes=offset_minutes))
        self._source = source or timezone.now

    def now(self):
        return self._source().astimezone(self.tz)

    def today(self):
        return self.now().date()

    def minute_of_day(self):
        current = self.now()
        return current.hour * 60 + current.minute

    def is_past_date(self, day):
        return day < self.today()

    def has_started(self, day, slot_minutes):
        """True once a slot starting at ``slot_minutes`` on ``day`` is no longer bookable."""
        today = self.today()
        if day != today:
            return day < today
        return slot_minutes <= self.minute_of_day()


def fixed_clock(moment, offset_minutes=None):
    """Clock frozen at ``moment`` (an aware datetime)."""
    return Clock(offset_minutes=offset_minutes, source=lambda: moment)
