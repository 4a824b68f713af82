"""Booking ledger: confirmed and cancelled reservations.

The partial unique index ``unique_confirmed_booking_per_slot`` is what keeps
two concurrent writers from both confirming the same (ground, date, slot).
The existence check in :meth:`BookingLedger.try_confirm` only produces a
friendlier error on the common path; a writer that loses the race hits the
index and gets the same ``SlotAlreadyBooked``.
"""

import logging
import time

from django.conf import settings
from django.db import IntegrityError, OperationalError, transaction
from django.utils import timezone

from .exceptions import AlreadyCancelled, BookingNotFound, SlotAlreadyBooked
from .models import Booking, BookingActivityLog

logger = logging.getLogger(__name__)


def run_atomic(operation, retries=None, delay=0.1):
    """Run ``operation()`` in one transaction, retrying transient lock errors.

    Retries only apply at the outermost level; inside an existing
    transaction the error propagates to whoever owns it.
    """
    if retries is None:
        retries = settings.BOOKING_WRITE_RETRIES
    if transaction.get_connection().in_atomic_block:
        retries = 0

    for attempt in range(retries + 1):
        try:
            with transaction.atomic():
                return operation()
        except OperationalError:
            if attempt < retries:
                logger.warning('Database busy, retrying (attempt %s of %s)', attempt + 1, retries)
                time.sleep(delay)
                continue
            raise


class BookingLedger:

    def confirmed(self, ground_id, day):
        return Booking.objects.filter(ground_id=ground_id, date=day, status=Booking.CONFIRMED)

    def booked_slots(self, ground_id, day):
        return set(self.confirmed(ground_id, day).values_list('slot', flat=True))

    def is_booked(self, ground_id, day, slot):
        return self.confirmed(ground_id, day).filter(slot=slot).exists()

    def get(self, booking_id):
        booking = Booking.objects.filter(pk=booking_id).first()
        if booking is None:
            raise BookingNotFound()
        return booking

    def try_confirm(self, ground_id, day, slot, customer_name, customer_phone, user_uid, price_at_booking):
        """Insert a CONFIRMED booking or raise SlotAlreadyBooked."""
        with transaction.atomic():
            if self.is_booked(ground_id, day, slot):
                raise SlotAlreadyBooked([slot])

            try:
                with transaction.atomic():
                    booking = Booking.objects.create(
                        ground_id=ground_id,
                        date=day,
                        slot=slot,
                        customer_name=customer_name,
                        customer_phone=customer_phone,
                        user_uid=user_uid or '',
                        status=Booking.CONFIRMED,
                        price_at_booking=price_at_booking,
                    )
            except IntegrityError:
                if not self.confirmed(ground_id, day).filter(slot=slot).exists():
                    raise
                logger.info('Lost race for ground %s on %s at %s', ground_id, day, slot)
                raise SlotAlreadyBooked([slot]) from None

            BookingActivityLog.objects.create(booking=booking, action='CREATED', performed_by=user_uid or '')

        logger.info('Booking %s confirmed: ground %s on %s at %s', booking.id, ground_id, day, slot)
        return booking

    def cancel(self, booking_id, performed_by=''):
        """CONFIRMED -> CANCELLED, exactly once."""
        def _cancel():
            booking = Booking.objects.select_for_update().filter(pk=booking_id).first()
            if booking is None:
                raise BookingNotFound()
            if booking.status == Booking.CANCELLED:
                raise AlreadyCancelled()

            booking.status = Booking.CANCELLED
            booking.cancelled_at = timezone.now()
            booking.save(update_fields=['status', 'cancelled_at'])
            BookingActivityLog.objects.create(booking=booking, action='CANCELLED', performed_by=performed_by or '')
            return booking

        booking = run_atomic(_cancel)
        logger.info('Booking %s cancelled by %s', booking.id, performed_by or 'system')
        return booking
