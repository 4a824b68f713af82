from django.conf import settings

from .models import AdminUser


class AuthorizationPolicy:
    """Decides whether a verified identity is an administrator.

    A caller is an admin when any source says so: an ``admin``/``role``
    claim on the token, the ``ADMIN_EMAILS`` allowlist, or the persisted
    ``AdminUser`` roster.
    """

    def __init__(self, allowlist=None):
        if allowlist is None:
            allowlist = settings.ADMIN_EMAILS
        self.allowlist = {email.strip().lower() for email in allowlist if email.strip()}

    def is_admin(self, identity):
        if identity is None:
            return False
        return (
            self._has_admin_claim(identity)
            or self._in_allowlist(identity)
            or self._in_roster(identity)
        )

    def _has_admin_claim(self, identity):
        return identity.claims.get('admin') is True or identity.claims.get('role') == 'admin'

    def _in_allowlist(self, identity):
        return identity.normalized_email in self.allowlist

    def _in_roster(self, identity):
        email = identity.normalized_email
        if not email:
            return False
        return AdminUser.objects.filter(email=email).exists()
