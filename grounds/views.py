from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from accounts.decorators import admin_required, identity_required
from groundbook.http import BadJsonBody, json_error, read_json

from .hours import DAY_NAMES, HoursRule, InvalidOperatingHours, OperatingHoursStore
from .models import Ground


def _format_time(value):
    return value.strftime('%H:%M') if value else None


def hours_payload(hours):
    return {
        'id': hours.id,
        'groundId': hours.ground_id,
        'dayOfWeek': hours.day_of_week,
        'dayName': DAY_NAMES[hours.day_of_week],
        'isClosed': hours.is_closed,
        'startTime': _format_time(hours.start_time),
        'endTime': _format_time(hours.end_time),
        'slotDurationMinutes': hours.slot_duration_minutes,
    }


def ground_payload(ground):
    return {
        'id': ground.id,
        'name': ground.name,
        'city': ground.city,
        'location': ground.location,
        'description': ground.description,
        'category': ground.category,
        'pricePerHour': str(ground.price_per_hour),
    }


@require_GET
def ground_list(request):
    grounds = Ground.objects.all()
    category = request.GET.get('category')
    if category:
        grounds = grounds.filter(category=category)
    return JsonResponse([ground_payload(g) for g in grounds], safe=False)


@require_GET
def ground_detail(request, ground_id):
    ground = Ground.objects.filter(id=ground_id).first()
    if ground is None:
        return json_error('Ground not found.', status=404)
    hours = OperatingHoursStore().list_for_ground(ground.id)
    return JsonResponse({
        **ground_payload(ground),
        'operatingHours': [hours_payload(h) for h in hours],
    })


@require_GET
@identity_required
def operating_hours_list(request, ground_id):
    hours = OperatingHoursStore().list_for_ground(ground_id)
    return JsonResponse([hours_payload(h) for h in hours], safe=False)


@csrf_exempt
@require_http_methods(['PUT'])
@admin_required
def operating_hours_day(request, ground_id, day):
    ground = get_object_or_404(Ground, id=ground_id)
    try:
        rule = HoursRule.from_payload(read_json(request))
        hours = OperatingHoursStore().upsert(ground.id, day, rule)
    except (BadJsonBody, InvalidOperatingHours) as exc:
        return json_error(str(exc))

    return JsonResponse({
        'success': True,
        'message': f'Operating hours updated for {DAY_NAMES[day]}',
        'hours': hours_payload(hours),
    })


@csrf_exempt
@require_http_methods(['PUT'])
@admin_required
def operating_hours_batch(request, ground_id):
    ground = get_object_or_404(Ground, id=ground_id)
    try:
        entries = read_json(request).get('hours')
        if not isinstance(entries, list) or not entries:
            return json_error('Hours array is required and must not be empty.')

        rules = {}
        for entry in entries:
            if not isinstance(entry, dict):
                return json_error('Each hours entry must be an object.')
            day = entry.get('dayOfWeek', entry.get('day_of_week'))
            if not isinstance(day, int) or isinstance(day, bool) or not 0 <= day <= 6:
                return json_error(f'Invalid day of week: {day}. Must be 0-6.')
            if day in rules:
                return json_error(f'Duplicate entry for {DAY_NAMES[day]}.')
            rules[day] = HoursRule.from_payload(entry)

        saved = OperatingHoursStore().upsert_many(ground.id, rules)
    except (BadJsonBody, InvalidOperatingHours) as exc:
        return json_error(str(exc))

    return JsonResponse({
        'success': True,
        'message': 'Operating hours updated for all days.',
        'hours': [hours_payload(h) for h in saved],
    })
