import json

from django.http import JsonResponse


class BadJsonBody(ValueError):
    pass


def read_json(request):
    """Decoded JSON object from the request body; an empty body reads as {}."""
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise BadJsonBody('Request body must be valid JSON.')
    if not isinstance(payload, dict):
        raise BadJsonBody('Request body must be a JSON object.')
    return payload


def json_error(message, status=400, **extra):
    return JsonResponse({'error': message, **extra}, status=status)
