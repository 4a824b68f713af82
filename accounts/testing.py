"""Test support: a token verifier that trusts tokens of the form
``test:<uid>[:<email>[:admin]]``.

Enable it with ``override_settings(IDENTITY_TOKEN_VERIFIER='accounts.testing.verify_test_token')``.
"""

from .identity import IdentityVerificationError

TEST_VERIFIER = 'accounts.testing.verify_test_token'


def verify_test_token(token):
    parts = token.split(':')
    if len(parts) < 2 or parts[0] != 'test' or not parts[1]:
        raise IdentityVerificationError('Malformed test token.')
    claims = {'uid': parts[1]}
    if len(parts) > 2 and parts[2]:
        claims['email'] = parts[2]
    if len(parts) > 3 and parts[3] == 'admin':
        claims['role'] = 'admin'
    return claims


def bearer(uid, email='', admin=False):
    token = f'test:{uid}:{email}' + (':admin' if admin else '')
    return {'HTTP_AUTHORIZATION': f'Bearer {token}'}
