from dataclasses import dataclass

from grounds.hours import OperatingHoursStore
from grounds.models import Ground

from .clock import Clock
from .exceptions import GroundNotFound, InvalidDate, PastDate
from .ledger import BookingLedger
from .slot_generation import slots_for_rule, to_minutes
from .validators import parse_date


@dataclass(frozen=True)
class AvailabilitySlot:
    slot: str
    available: bool

    def as_dict(self):
        return {'slot': self.slot, 'available': self.available}


class AvailabilityResolver:
    """Bookable slots for one ground on one date.

    Computed fresh on every call: a slot is unavailable when it already has
    a confirmed booking or, on today's date, when it has already started.
    A closed day and a day with no configured hours both yield no slots.
    """

    def __init__(self, hours=None, ledger=None, clock=None):
        self.hours = hours or OperatingHoursStore()
        self.ledger = ledger or BookingLedger()
        self.clock = clock or Clock()

    def resolve(self, ground_id, value):
        day = parse_date(value)
        if day is None:
            raise InvalidDate()
        if self.clock.is_past_date(day):
            raise PastDate()
        if not Ground.objects.filter(pk=ground_id).exists():
            raise GroundNotFound()

        candidates = slots_for_rule(self.hours.for_date(ground_id, day))
        if not candidates:
            return []

        booked = self.ledger.booked_slots(ground_id, day)
        return [
            AvailabilitySlot(
                slot=slot,
                available=slot not in booked and not self.clock.has_started(day, to_minutes(slot)),
            )
            for slot in candidates
        ]
