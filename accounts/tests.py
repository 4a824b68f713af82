import json
from io import StringIO
from unittest import mock

from django.core.exceptions import ImproperlyConfigured
from django.core.management import CommandError, call_command
from django.test import TestCase, override_settings
from firebase_admin import exceptions as firebase_exceptions

from .authorization import AuthorizationPolicy
from .identity import Identity, IdentityVerificationError, verify_firebase_token
from .models import AdminUser, UserProfile
from .testing import TEST_VERIFIER, bearer


def unconfigured_verifier(token):
    raise ImproperlyConfigured('no credentials')


class AuthorizationPolicyTests(TestCase):

    def test_admin_claim(self):
        policy = AuthorizationPolicy(allowlist=[])

        self.assertTrue(policy.is_admin(Identity(uid='a', claims={'admin': True})))
        self.assertTrue(policy.is_admin(Identity(uid='a', claims={'role': 'admin'})))
        self.assertFalse(policy.is_admin(Identity(uid='a', claims={'admin': 'yes'})))

    def test_allowlist_is_case_insensitive(self):
        policy = AuthorizationPolicy(allowlist=[' Owner@Example.com '])

        self.assertTrue(policy.is_admin(Identity(uid='a', email='owner@example.COM')))
        self.assertFalse(policy.is_admin(Identity(uid='b', email='player@example.com')))

    def test_roster(self):
        AdminUser.objects.create(email='Manager@Example.com')
        policy = AuthorizationPolicy(allowlist=[])

        self.assertTrue(policy.is_admin(Identity(uid='a', email='manager@example.com')))
        self.assertFalse(policy.is_admin(Identity(uid='a')))
        self.assertFalse(policy.is_admin(None))


class IdentityTests(TestCase):

    def test_from_claims_accepts_provider_variants(self):
        identity = Identity.from_claims({'user_id': 'abc', 'email': 'a@b.c', 'phoneNumber': '+92300'})

        self.assertEqual(identity.uid, 'abc')
        self.assertEqual(identity.phone_number, '+92300')
        self.assertEqual(Identity.from_claims({'sub': 'xyz'}).uid, 'xyz')

    def test_from_claims_requires_uid(self):
        with self.assertRaises(IdentityVerificationError):
            Identity.from_claims({'email': 'a@b.c'})

    @override_settings(FIREBASE_PROJECT_ID='', FIREBASE_CLIENT_EMAIL='', FIREBASE_PRIVATE_KEY='')
    def test_firebase_verifier_without_credentials(self):
        with self.assertRaises(ImproperlyConfigured):
            verify_firebase_token('anything')

    def test_firebase_backend_failure_is_a_verification_error(self):
        with mock.patch('accounts.identity._get_firebase_app', return_value=object()), \
                mock.patch('accounts.identity.firebase_auth.verify_id_token',
                           side_effect=firebase_exceptions.UnavailableError('backend down')):
            with self.assertRaises(IdentityVerificationError):
                verify_firebase_token('anything')

    @override_settings(IDENTITY_TOKEN_VERIFIER='accounts.identity.verify_firebase_token')
    def test_firebase_backend_failure_does_not_break_public_endpoints(self):
        with mock.patch('accounts.identity._get_firebase_app', return_value=object()), \
                mock.patch('accounts.identity.firebase_auth.verify_id_token',
                           side_effect=firebase_exceptions.UnknownError('unexpected')):
            public = self.client.get('/api/grounds', HTTP_AUTHORIZATION='Bearer token')
            private = self.client.get('/api/auth/me', HTTP_AUTHORIZATION='Bearer token')

        self.assertEqual(public.status_code, 200)
        self.assertEqual(private.status_code, 401)


@override_settings(IDENTITY_TOKEN_VERIFIER=TEST_VERIFIER, ADMIN_EMAILS=[])
class BearerTokenTests(TestCase):

    def test_missing_token(self):
        response = self.client.get('/api/auth/me')

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['error'], 'Authentication token missing.')

    def test_invalid_token(self):
        response = self.client.get('/api/auth/me', HTTP_AUTHORIZATION='Bearer garbage')

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['error'], 'Invalid or expired authentication token.')

    def test_valid_token(self):
        body = self.client.get('/api/auth/me', **bearer('user-1', 'player@example.com')).json()

        self.assertEqual(body['uid'], 'user-1')
        self.assertEqual(body['email'], 'player@example.com')
        self.assertFalse(body['isAdmin'])

        self.assertTrue(self.client.get('/api/auth/me', **bearer('ops', admin=True)).json()['isAdmin'])

    @override_settings(IDENTITY_TOKEN_VERIFIER='accounts.tests.unconfigured_verifier')
    def test_verifier_not_configured(self):
        with self.assertLogs('accounts.middleware', level='ERROR'):
            response = self.client.get('/api/auth/me', **bearer('user-1'))

        self.assertEqual(response.status_code, 500)


@override_settings(IDENTITY_TOKEN_VERIFIER=TEST_VERIFIER)
class ProfileApiTests(TestCase):

    def put(self, payload, uid='user-1'):
        return self.client.put(
            '/api/profile', data=json.dumps(payload), content_type='application/json', **bearer(uid, 'p@example.com'),
        )

    def test_profile_round_trip(self):
        self.assertEqual(self.client.get('/api/profile', **bearer('user-1')).status_code, 404)

        response = self.put({'name': '  Ali Khan ', 'phone': ' 03001234567 '})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['name'], 'Ali Khan')

        body = self.client.get('/api/profile', **bearer('user-1', 'p@example.com')).json()
        self.assertEqual(body['phone'], '03001234567')
        self.assertEqual(body['email'], 'p@example.com')

    def test_update_overwrites(self):
        self.put({'name': 'Ali', 'phone': '1'})
        self.put({'name': 'Ali Khan', 'phone': '2'})

        self.assertEqual(UserProfile.objects.count(), 1)
        self.assertEqual(UserProfile.objects.get(pk='user-1').phone, '2')

    def test_requires_name_and_phone(self):
        self.assertEqual(self.put({'name': 'Ali', 'phone': '   '}).status_code, 400)
        self.assertEqual(self.put({'name': 'Ali'}).status_code, 400)
        self.assertFalse(UserProfile.objects.exists())

    def test_requires_identity(self):
        self.assertEqual(self.client.put('/api/profile', data='{}', content_type='application/json').status_code, 401)


class CreateAdminCommandTests(TestCase):

    def test_creates_admin(self):
        out = StringIO()
        call_command('create_admin', 'Owner@Example.com', '--name', 'Owner', stdout=out)

        self.assertTrue(AdminUser.objects.filter(email='owner@example.com', name='Owner').exists())
        self.assertIn('created successfully', out.getvalue())

    def test_existing_admin(self):
        AdminUser.objects.create(email='owner@example.com')
        out = StringIO()

        call_command('create_admin', 'owner@example.com', stdout=out)

        self.assertIn('already an admin', out.getvalue())
        self.assertEqual(AdminUser.objects.count(), 1)

    def test_invalid_email(self):
        with self.assertRaises(CommandError):
            call_command('create_admin', 'not-an-email', stdout=StringIO())


@override_settings(IDENTITY_TOKEN_VERIFIER=TEST_VERIFIER, ADMIN_EMAILS=[])
class AdminRosterApiTests(TestCase):
    url = '/api/admin/admins'

    def setUp(self):
        self.me = AdminUser.objects.create(email='ops@example.com', name='Ops')
        self.other = AdminUser.objects.create(email='owner@example.com', name='Owner')
        self.admin = bearer('ops', 'Ops@Example.com')

    def post(self, payload, headers=None):
        return self.client.post(
            self.url, data=json.dumps(payload), content_type='application/json', **(headers or self.admin),
        )

    def test_roster_is_admin_only(self):
        self.assertEqual(self.client.get(self.url).status_code, 401)
        self.assertEqual(self.client.get(self.url, **bearer('player', 'player@example.com')).status_code, 403)
        self.assertEqual(self.post({'email': 'x@example.com'}, bearer('player')).status_code, 403)

    def test_list(self):
        body = self.client.get(self.url, **self.admin).json()

        self.assertEqual({a['email'] for a in body['admins']}, {'ops@example.com', 'owner@example.com'})

    def test_add_admin_grants_access(self):
        response = self.post({'email': ' New@Example.com ', 'name': 'New'})

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['email'], 'new@example.com')
        self.assertEqual(response.json()['createdBy'], 'ops@example.com')
        me = self.client.get('/api/auth/me', **bearer('new', 'new@example.com')).json()
        self.assertTrue(me['isAdmin'])

    def test_add_validation(self):
        self.assertEqual(self.post({}).json()['error'], 'Email is required.')
        self.assertEqual(self.post({'email': 'not-an-email'}).json()['error'], 'Invalid email format.')

        duplicate = self.post({'email': 'OWNER@example.com'})
        self.assertEqual(duplicate.status_code, 400)
        self.assertEqual(duplicate.json()['error'], 'This email is already an admin.')
        self.assertEqual(AdminUser.objects.count(), 2)

    def test_remove_admin(self):
        response = self.client.delete(f'{self.url}/{self.other.id}', **self.admin)

        self.assertEqual(response.status_code, 200)
        self.assertFalse(AdminUser.objects.filter(pk=self.other.id).exists())

    def test_remove_guards(self):
        self.assertEqual(self.client.delete(f'{self.url}/424242', **self.admin).status_code, 404)

        yourself = self.client.delete(f'{self.url}/{self.me.id}', **self.admin)
        self.assertEqual(yourself.status_code, 400)
        self.assertEqual(yourself.json()['error'], 'You cannot remove your own admin access.')

        self.other.delete()
        superuser = bearer('root', 'root@example.com', admin=True)
        last = self.client.delete(f'{self.url}/{self.me.id}', **superuser)
        self.assertEqual(last.status_code, 400)
        self.assertEqual(last.json()['error'], 'Cannot delete the last admin user.')
        self.assertTrue(AdminUser.objects.filter(pk=self.me.id).exists())
