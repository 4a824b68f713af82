import logging

from django.core.exceptions import ImproperlyConfigured

from .identity import IdentityVerificationError, verify_token

logger = logging.getLogger(__name__)


class BearerTokenMiddleware:
    """Attach ``request.identity`` from an ``Authorization: Bearer`` header.

    Never rejects a request itself: endpoints that need a caller use the
    decorators in ``accounts.decorators``, which read ``request.auth_failure``
    to explain why no identity is present.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.identity = None
        request.auth_failure = (401, 'Authentication token missing.')

        header = request.headers.get('Authorization', '')
        if header.startswith('Bearer ') and header[7:].strip():
            try:
                request.identity = verify_token(header[7:].strip())
                request.auth_failure = None
            except ImproperlyConfigured as exc:
                logger.error('Identity verification unavailable: %s', exc)
                request.auth_failure = (500, 'Authentication is not configured on the server.')
            except IdentityVerificationError as exc:
                logger.warning('Rejected bearer token: %s', exc)
                request.auth_failure = (401, 'Invalid or expired authentication token.')

        return self.get_response(request)
