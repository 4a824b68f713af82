"""Operating-hours store.

Rules are keyed by (ground, day_of_week) where day_of_week runs Monday=0
through Sunday=6. Every date-to-weekday conversion in the project goes
through :func:`day_of_week` so the numbering cannot drift between the
availability and booking paths.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from django.db import transaction

from .models import OperatingHours

logger = logging.getLogger(__name__)

DAY_NAMES = ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday')

MIN_SLOT_DURATION = 15
MAX_SLOT_DURATION = 480


class InvalidOperatingHours(ValueError):
    pass


def day_of_week(value: date) -> int:
    """Storage weekday for a calendar date (Monday=0 .. Sunday=6)."""
    return value.weekday()


def parse_time(value) -> Optional[time]:
    if value is None or value == '':
        return None
    if isinstance(value, time):
        return value
    try:
        return datetime.strptime(str(value), '%H:%M').time()
    except ValueError:
        raise InvalidOperatingHours(f"Invalid time '{value}'. Use HH:MM.")


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


@dataclass(frozen=True)
class HoursRule:
    is_closed: bool = False
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    slot_duration_minutes: int = 60

    @classmethod
    def from_payload(cls, payload):
        """Build a rule from an API payload (camelCase or snake_case keys)."""
        def pick(*keys):
            for key in keys:
                if key in payload:
                    return payload[key]
            return None

        duration = pick('slotDurationMinutes', 'slot_duration_minutes')
        if duration in (None, ''):
            duration = 60
        try:
            duration = int(duration)
        except (TypeError, ValueError):
            raise InvalidOperatingHours('Slot duration must be a whole number of minutes.')

        return cls(
            is_closed=bool(pick('isClosed', 'is_closed')),
            start_time=parse_time(pick('startTime', 'start_time')),
            end_time=parse_time(pick('endTime', 'end_time')),
            slot_duration_minutes=duration,
        )

    def validate(self, day):
        day_name = DAY_NAMES[day] if 0 <= day <= 6 else str(day)
        if self.is_closed:
            return
        if self.start_time is None or self.end_time is None:
            raise InvalidOperatingHours(f'Start and end times are required for {day_name}.')
        if not MIN_SLOT_DURATION <= self.slot_duration_minutes <= MAX_SLOT_DURATION:
            raise InvalidOperatingHours(
                f'Slot duration for {day_name} must be {MIN_SLOT_DURATION}-{MAX_SLOT_DURATION} minutes.'
            )
        start, end = _minutes(self.start_time), _minutes(self.end_time)
        if start >= end:
            raise InvalidOperatingHours(f'Start time must be before end time for {day_name}.')
        if start + self.slot_duration_minutes > end:
            raise InvalidOperatingHours(f'No {self.slot_duration_minutes}-minute slot fits on {day_name}.')


def _validate_day(day):
    if not isinstance(day, int) or isinstance(day, bool) or not 0 <= day <= 6:
        raise InvalidOperatingHours(f'Invalid day of week: {day}. Must be 0-6.')


class OperatingHoursStore:
    """Read and replace per-weekday operating-hours rules."""

    def get(self, ground_id, day) -> Optional[OperatingHours]:
        return OperatingHours.objects.filter(ground_id=ground_id, day_of_week=day).first()

    def for_date(self, ground_id, value: date) -> Optional[OperatingHours]:
        return self.get(ground_id, day_of_week(value))

    def list_for_ground(self, ground_id):
        return list(OperatingHours.objects.filter(ground_id=ground_id).order_by('day_of_week'))

    def upsert(self, ground_id, day, rule: HoursRule) -> OperatingHours:
        # full replace of the day's rule, never a partial merge
        _validate_day(day)
        rule.validate(day)
        hours, created = OperatingHours.objects.update_or_create(
            ground_id=ground_id,
            day_of_week=day,
            defaults={
                'is_closed': rule.is_closed,
                'start_time': rule.start_time,
                'end_time': rule.end_time,
                'slot_duration_minutes': rule.slot_duration_minutes,
            },
        )
        logger.info(
            'Operating hours %s for ground %s day %s',
            'created' if created else 'replaced', ground_id, DAY_NAMES[day],
        )
        return hours

    @transaction.atomic
    def upsert_many(self, ground_id, rules):
        """Replace several days at once; any invalid rule rolls back the whole batch."""
        for day, rule in rules.items():
            _validate_day(day)
            rule.validate(day)
        return [self.upsert(ground_id, day, rule) for day, rule in sorted(rules.items())]
