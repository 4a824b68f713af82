"""
Expected, user-facing outcomes of the availability and booking paths.
Raised by the resolver, ledger and workflow and rendered by the views.
"""


class BookingError(Exception):
    code = 'BOOKING_ERROR'
    status = 400
    default_message = 'Booking request failed.'

    def __init__(self, message=None, **details):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def as_dict(self):
        return {'error': self.message, 'code': self.code, **self.details}


class InvalidInput(BookingError):
    code = 'INVALID_INPUT'
    default_message = 'groundId, date, and slots are required.'


class InvalidDate(BookingError):
    code = 'INVALID_DATE'
    default_message = 'Invalid date format. Use YYYY-MM-DD.'


class PastDate(BookingError):
    code = 'PAST_DATE'
    default_message = 'Cannot view availability for past dates.'


class PastSlot(BookingError):
    code = 'PAST_SLOT'
    default_message = 'Cannot book a time slot that has already passed.'


class ProfileIncomplete(BookingError):
    code = 'PROFILE_REQUIRED'
    status = 428
    default_message = 'Complete your profile before booking.'


class GroundNotFound(BookingError):
    code = 'GROUND_NOT_FOUND'
    status = 404
    default_message = 'Ground not found.'


class OutsideOperatingHours(BookingError):
    code = 'OUTSIDE_OPERATING_HOURS'
    default_message = 'The ground is not open at the requested time.'


class SlotAlreadyBooked(BookingError):
    code = 'SLOT_ALREADY_BOOKED'
    status = 409
    default_message = 'This slot is already booked for the selected date.'

    def __init__(self, slots, message=None):
        self.slots = list(slots)
        super().__init__(message, slots=self.slots)


class BookingNotFound(BookingError):
    code = 'NOT_FOUND'
    status = 404
    default_message = 'Booking not found.'


class AlreadyCancelled(BookingError):
    code = 'ALREADY_CANCELLED'
    status = 409
    default_message = 'Booking is already cancelled.'
