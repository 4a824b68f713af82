import logging
from functools import wraps

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from accounts.authorization import AuthorizationPolicy
from accounts.decorators import admin_required, identity_required
from groundbook.http import BadJsonBody, json_error, read_json

from .availability import AvailabilityResolver
from .exceptions import BookingError, InvalidDate
from .ledger import BookingLedger
from .models import Booking
from .services import BookingWorkflow

logger = logging.getLogger(__name__)


def booking_errors(view):
    """Render expected booking outcomes as JSON; anything else is a logged 500."""
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except BookingError as exc:
            return JsonResponse(exc.as_dict(), status=exc.status)
        except Exception:
            logger.exception('Unexpected error in %s', view.__name__)
            return json_error('Internal server error.', status=500)
    return wrapper


def booking_payload(booking):
    return {
        'id': booking.id,
        'groundId': booking.ground_id,
        'date': booking.date.isoformat(),
        'slot': booking.slot,
        'customerName': booking.customer_name,
        'customerPhone': booking.customer_phone,
        'userUid': booking.user_uid or None,
        'status': booking.status,
        'priceAtBooking': str(booking.price_at_booking),
        'createdAt': booking.created_at.isoformat(),
    }


@require_GET
@booking_errors
def ground_availability(request, ground_id):
    date = request.GET.get('date')
    if not date:
        raise InvalidDate('date query parameter is required (YYYY-MM-DD).')

    slots = AvailabilityResolver().resolve(ground_id, date)
    return JsonResponse({
        'groundId': ground_id,
        'date': date,
        'slots': [s.as_dict() for s in slots],
    })


@csrf_exempt
@require_http_methods(['GET', 'POST'])
def bookings(request):
    if request.method == 'GET':
        return all_bookings(request)
    return create_booking(request)


@admin_required
@booking_errors
def all_bookings(request):
    rows = Booking.objects.select_related('ground').order_by('-date', 'slot')
    return JsonResponse([
        {
            **booking_payload(b),
            'groundName': b.ground.name,
            'city': b.ground.city,
            'location': b.ground.location,
        }
        for b in rows
    ], safe=False)


@identity_required
@booking_errors
def create_booking(request):
    try:
        payload = read_json(request)
    except BadJsonBody as exc:
        return json_error(str(exc))

    slots = payload.get('slots')
    if slots is None:
        slots = payload.get('slot')

    created = BookingWorkflow().book(
        user_uid=request.identity.uid,
        ground_id=payload.get('groundId'),
        date=payload.get('date'),
        slots=slots,
    )
    return JsonResponse({'bookings': [booking_payload(b) for b in created]}, status=201)


@require_GET
@identity_required
@booking_errors
def my_bookings(request):
    rows = Booking.objects.filter(user_uid=request.identity.uid).order_by('-date', 'slot')
    return JsonResponse([booking_payload(b) for b in rows], safe=False)


@csrf_exempt
@require_http_methods(['DELETE'])
@identity_required
@booking_errors
def cancel_booking(request, booking_id):
    ledger = BookingLedger()
    booking = ledger.get(booking_id)

    identity = request.identity
    if booking.user_uid != identity.uid and not AuthorizationPolicy().is_admin(identity):
        return json_error('You can only cancel your own bookings.', status=403)

    ledger.cancel(booking.id, performed_by=identity.uid)
    return JsonResponse({'success': True})
