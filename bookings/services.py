import logging

from django.conf import settings
from django.db import transaction

from accounts.models import UserProfile
from grounds.hours import DAY_NAMES, OperatingHoursStore, day_of_week
from grounds.models import Ground
from notifications.service import dispatch_booking_notification

from .clock import Clock
from .exceptions import (
    GroundNotFound,
    InvalidInput,
    OutsideOperatingHours,
    PastSlot,
    ProfileIncomplete,
    SlotAlreadyBooked,
)
from .ledger import BookingLedger, run_atomic
from .slot_generation import parse_slot, slots_for_rule
from .validators import parse_date, parse_ground_id

logger = logging.getLogger(__name__)


class BookingWorkflow:
    """Validate a booking request and commit it to the ledger.

    A request for several slots is all-or-nothing: every slot is confirmed
    inside one transaction and any conflict rolls the whole request back,
    reporting every conflicting slot.
    """

    def __init__(self, hours=None, ledger=None, clock=None, notifier=None, max_slots=None):
        self.hours = hours or OperatingHoursStore()
        self.ledger = ledger or BookingLedger()
        self.clock = clock or Clock()
        self.notifier = notifier or dispatch_booking_notification
        self.max_slots = max_slots or settings.BOOKING_MAX_SLOTS_PER_REQUEST

    def book(self, user_uid, ground_id, date, slots):
        ground_id, day, requested = self._validate_input(ground_id, date, slots)
        self._validate_timing(day, requested)
        profile = self._require_profile(user_uid)
        ground = self._get_ground(ground_id)
        self._check_operating_hours(ground, day, requested)
        return self._commit(ground, day, requested, profile, user_uid)

    def _validate_input(self, ground_id, date, slots):
        parsed_ground = parse_ground_id(ground_id)
        if parsed_ground is None or not date or not slots:
            raise InvalidInput()

        day = parse_date(date)
        if day is None:
            raise InvalidInput('Invalid date format. Use YYYY-MM-DD.')

        if isinstance(slots, str):
            slots = [slots]
        if not isinstance(slots, (list, tuple)):
            raise InvalidInput('slots must be a list of HH:MM times.')
        if len(slots) > self.max_slots:
            raise InvalidInput(f'At most {self.max_slots} slots can be booked at once.')

        requested = {}
        for slot in slots:
            try:
                minutes = parse_slot(slot)
            except ValueError:
                raise InvalidInput('Invalid slot selected.', slots=[slot])
            if slot in requested:
                raise InvalidInput(f'Slot {slot} was requested more than once.', slots=[slot])
            requested[slot] = minutes

        return parsed_ground, day, sorted(requested, key=requested.get)

    def _validate_timing(self, day, requested):
        if self.clock.is_past_date(day):
            raise PastSlot('Cannot book dates in the past.')
        elapsed = [slot for slot in requested if self.clock.has_started(day, parse_slot(slot))]
        if elapsed:
            raise PastSlot(slots=elapsed)

    def _require_profile(self, user_uid):
        profile = UserProfile.objects.filter(user_uid=user_uid).first()
        if profile is None or not profile.is_complete:
            raise ProfileIncomplete()
        return profile

    def _get_ground(self, ground_id):
        ground = Ground.objects.filter(pk=ground_id).first()
        if ground is None:
            raise GroundNotFound()
        return ground

    def _check_operating_hours(self, ground, day, requested):
        offered = set(slots_for_rule(self.hours.for_date(ground.id, day)))
        if not offered:
            raise OutsideOperatingHours(f'The ground is closed on {DAY_NAMES[day_of_week(day)]}.')
        outside = [slot for slot in requested if slot not in offered]
        if outside:
            raise OutsideOperatingHours(
                'Requested slots are outside the ground\'s operating hours.', slots=outside,
            )

    def _commit(self, ground, day, requested, profile, user_uid):
        # read once so every slot in the request carries the same snapshot
        price = ground.price_per_hour

        def confirm_all():
            created, conflicts = [], []
            for slot in requested:
                try:
                    created.append(self.ledger.try_confirm(
                        ground.id, day, slot,
                        customer_name=profile.name,
                        customer_phone=profile.phone,
                        user_uid=user_uid,
                        price_at_booking=price,
                    ))
                except SlotAlreadyBooked:
                    conflicts.append(slot)

            if conflicts:
                message = None
                if len(conflicts) > 1:
                    message = f"Slots {', '.join(conflicts)} are already booked for the selected date."
                raise SlotAlreadyBooked(conflicts, message=message)

            for booking in created:
                transaction.on_commit(self._notification_for(booking), robust=True)
            return created

        bookings = run_atomic(confirm_all)
        logger.info('User %s booked %s slot(s) on ground %s for %s', user_uid, len(bookings), ground.id, day)
        return bookings

    def _notification_for(self, booking):
        # robust on_commit logs a failing callback by its __qualname__
        def notify_booking_created():
            self.notifier(booking)
        return notify_booking_created
