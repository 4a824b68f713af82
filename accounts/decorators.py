from functools import wraps

from groundbook.http import json_error

from .authorization import AuthorizationPolicy


def identity_required(view):
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if getattr(request, 'identity', None) is None:
            status, message = getattr(request, 'auth_failure', None) or (401, 'Authentication required.')
            return json_error(message, status=status)
        return view(request, *args, **kwargs)
    return wrapper


def admin_required(view):
    @identity_required
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if not AuthorizationPolicy().is_admin(request.identity):
            return json_error('Admin privileges required.', status=403)
        return view(request, *args, **kwargs)
    return wrapper
