"""Verified caller identity.

The identity provider issues bearer tokens; this module only turns a token
into an :class:`Identity` by delegating to the verifier named in
``settings.IDENTITY_TOKEN_VERIFIER``. The default verifier checks Firebase
ID tokens with ``firebase-admin``.
"""

import logging
import threading
from dataclasses import dataclass, field

import firebase_admin
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin import exceptions as firebase_exceptions

logger = logging.getLogger(__name__)

_firebase_app = None
_firebase_lock = threading.Lock()


class IdentityVerificationError(Exception):
    pass


@dataclass(frozen=True)
class Identity:
    uid: str
    email: str = None
    name: str = None
    phone_number: str = None
    claims: dict = field(default_factory=dict, compare=False, hash=False)

    @property
    def normalized_email(self):
        return self.email.strip().lower() if self.email else None

    @classmethod
    def from_claims(cls, claims):
        uid = claims.get('uid') or claims.get('user_id') or claims.get('sub')
        if not uid:
            raise IdentityVerificationError('Token carries no user id.')
        return cls(
            uid=str(uid),
            email=claims.get('email'),
            name=claims.get('name') or claims.get('displayName'),
            phone_number=claims.get('phone_number') or claims.get('phoneNumber'),
            claims=dict(claims),
        )


def _get_firebase_app():
    global _firebase_app

    with _firebase_lock:
        if _firebase_app is not None:
            return _firebase_app

        project_id = settings.FIREBASE_PROJECT_ID
        client_email = settings.FIREBASE_CLIENT_EMAIL
        private_key = settings.FIREBASE_PRIVATE_KEY
        if not project_id or not client_email or not private_key:
            raise ImproperlyConfigured(
                'Firebase credentials are missing. Set FIREBASE_PROJECT_ID, '
                'FIREBASE_CLIENT_EMAIL, and FIREBASE_PRIVATE_KEY.'
            )

        credential = credentials.Certificate({
            'type': 'service_account',
            'project_id': project_id,
            'client_email': client_email,
            'private_key': private_key.replace('\\n', '\n'),
            'token_uri': 'https://oauth2.googleapis.com/token',
        })
        _firebase_app = firebase_admin.initialize_app(credential, name='groundbook')
        return _firebase_app


def verify_firebase_token(token):
    app = _get_firebase_app()
    try:
        return firebase_auth.verify_id_token(token, app=app)
    except (ValueError, firebase_exceptions.FirebaseError) as exc:
        raise IdentityVerificationError(str(exc)) from exc


def verify_token(token):
    """Verify a bearer token and return the caller's :class:`Identity`.

    Raises IdentityVerificationError for a bad token and ImproperlyConfigured
    when the verifier itself cannot run.
    """
    verifier = import_string(settings.IDENTITY_TOKEN_VERIFIER)
    claims = verifier(token)
    return Identity.from_claims(claims)
