import re
from datetime import time

SLOT_PATTERN = re.compile(r'^(\d{2}):(\d{2})$')


def to_minutes(value):
    """Minutes since midnight for a ``time`` or an ``HH:MM`` string."""
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    return parse_slot(value)


def format_slot(minutes):
    return f'{minutes // 60:02d}:{minutes % 60:02d}'


def parse_slot(value):
    """Minutes since midnight for a zero-padded ``HH:MM`` string; ValueError otherwise."""
    match = SLOT_PATTERN.match(value) if isinstance(value, str) else None
    if match is None:
        raise ValueError(f'Invalid slot {value!r}. Use HH:MM.')
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f'Invalid slot {value!r}. Use HH:MM.')
    return hours * 60 + minutes


def generate_slots(start_time, end_time, duration_minutes):
    """Ordered slot start times from ``start_time`` stepping by ``duration_minutes``.

    A slot is only produced when the whole duration fits before
    ``end_time``; there is never a trailing partial slot.
    """
    if duration_minutes <= 0:
        raise ValueError('Slot duration must be positive.')

    current = to_minutes(start_time)
    end = to_minutes(end_time)
    slots = []
    while current + duration_minutes <= end:
        slots.append(format_slot(current))
        current += duration_minutes
    return slots


def slots_for_rule(rule):
    """Slots offered by an operating-hours rule; none for closed or missing rules."""
    if rule is None or not rule.is_open:
        return []
    return generate_slots(rule.start_time, rule.end_time, rule.slot_duration_minutes)
