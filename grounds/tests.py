import json
from datetime import date, time
from decimal import Decimal
from io import StringIO

from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.db import IntegrityError, transaction
from django.forms import inlineformset_factory
from django.test import TestCase, override_settings

from accounts.testing import TEST_VERIFIER, bearer

from .hours import HoursRule, InvalidOperatingHours, OperatingHoursStore, day_of_week
from .managers import DEFAULT_END_TIME, DEFAULT_SLOT_DURATION, DEFAULT_START_TIME
from .models import Ground, OperatingHours


def make_ground(name='Lahore Sports Complex', category='Football'):
    return Ground.objects.create_with_default_hours(
        name=name,
        city='Lahore',
        location='Gaddafi Stadium vicinity',
        category=category,
        price_per_hour=Decimal('15000'),
    )


class OperatingHoursDefaultsTests(TestCase):

    def test_new_ground_is_open_every_day(self):
        ground = make_ground()

        rules = OperatingHours.objects.filter(ground=ground)
        self.assertEqual(sorted(r.day_of_week for r in rules), list(range(7)))
        for rule in rules:
            self.assertFalse(rule.is_closed)
            self.assertEqual(rule.start_time, DEFAULT_START_TIME)
            self.assertEqual(rule.end_time, DEFAULT_END_TIME)
            self.assertEqual(rule.slot_duration_minutes, DEFAULT_SLOT_DURATION)

    def test_seeding_only_fills_missing_days(self):
        ground = make_ground()
        OperatingHoursStore().upsert(ground.id, 4, HoursRule(is_closed=True))
        OperatingHours.objects.filter(ground=ground, day_of_week__in=[5, 6]).delete()

        self.assertEqual(OperatingHours.objects.seed_defaults(ground), 2)
        self.assertEqual(OperatingHours.objects.seed_defaults(ground), 0)
        self.assertTrue(OperatingHours.objects.get(ground=ground, day_of_week=4).is_closed)

    def test_weekday_numbering_starts_monday(self):
        self.assertEqual(day_of_week(date(2030, 1, 7)), 0)
        self.assertEqual(day_of_week(date(2030, 1, 13)), 6)


class OperatingHoursStoreTests(TestCase):

    def setUp(self):
        self.ground = make_ground()
        self.store = OperatingHoursStore()

    def test_upsert_replaces_whole_rule(self):
        self.store.upsert(self.ground.id, 2, HoursRule(is_closed=True))
        hours = self.store.upsert(
            self.ground.id, 2,
            HoursRule(start_time=time(8, 0), end_time=time(12, 0), slot_duration_minutes=90),
        )

        self.assertFalse(hours.is_closed)
        self.assertEqual(hours.slot_duration_minutes, 90)
        self.assertEqual(OperatingHours.objects.filter(ground=self.ground, day_of_week=2).count(), 1)

    def test_closing_a_day_clears_times(self):
        hours = self.store.upsert(self.ground.id, 3, HoursRule(is_closed=True))

        self.assertTrue(hours.is_closed)
        self.assertIsNone(hours.start_time)
        self.assertFalse(hours.is_open)

    def test_for_date_uses_weekday(self):
        self.store.upsert(self.ground.id, 2, HoursRule(is_closed=True))

        self.assertTrue(self.store.for_date(self.ground.id, date(2030, 1, 9)).is_closed)
        self.assertFalse(self.store.for_date(self.ground.id, date(2030, 1, 10)).is_closed)

    def test_rejects_invalid_rules(self):
        invalid = [
            HoursRule(start_time=None, end_time=time(12, 0)),
            HoursRule(start_time=time(12, 0), end_time=time(12, 0)),
            HoursRule(start_time=time(13, 0), end_time=time(12, 0)),
            HoursRule(start_time=time(8, 0), end_time=time(12, 0), slot_duration_minutes=10),
            HoursRule(start_time=time(8, 0), end_time=time(16, 0), slot_duration_minutes=500),
            HoursRule(start_time=time(8, 0), end_time=time(9, 0), slot_duration_minutes=90),
        ]
        for rule in invalid:
            with self.assertRaises(InvalidOperatingHours):
                self.store.upsert(self.ground.id, 1, rule)

        with self.assertRaises(InvalidOperatingHours):
            self.store.upsert(self.ground.id, 7, HoursRule(is_closed=True))

    def test_batch_is_all_or_nothing(self):
        with self.assertRaises(InvalidOperatingHours):
            self.store.upsert_many(self.ground.id, {
                0: HoursRule(is_closed=True),
                1: HoursRule(start_time=time(12, 0), end_time=time(8, 0)),
            })

        self.assertFalse(self.store.get(self.ground.id, 0).is_closed)

    def test_one_rule_per_ground_and_day(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                OperatingHours.objects.create(ground=self.ground, day_of_week=0, is_closed=True)

    def test_payload_accepts_both_key_styles(self):
        camel = HoursRule.from_payload({'isClosed': False, 'startTime': '07:00', 'endTime': '21:00', 'slotDurationMinutes': 120})
        snake = HoursRule.from_payload({'is_closed': False, 'start_time': '07:00', 'end_time': '21:00', 'slot_duration_minutes': '120'})

        self.assertEqual(camel, snake)
        with self.assertRaises(InvalidOperatingHours):
            HoursRule.from_payload({'startTime': '7am'})


class OperatingHoursModelValidationTests(TestCase):

    def setUp(self):
        self.ground = Ground.objects.create(
            name='Bare', city='Karachi', location='DHA', price_per_hour=Decimal('5000'),
        )

    def test_full_clean_rejects_inverted_window(self):
        hours = OperatingHours(ground=self.ground, day_of_week=0, start_time=time(20, 0), end_time=time(8, 0))

        with self.assertRaises(ValidationError):
            hours.full_clean()

    def test_full_clean_rejects_open_day_without_times(self):
        hours = OperatingHours(ground=self.ground, day_of_week=0, is_closed=False)

        with self.assertRaises(ValidationError):
            hours.full_clean()

    def test_full_clean_accepts_closed_day(self):
        OperatingHours(ground=self.ground, day_of_week=0, is_closed=True).full_clean()

    def test_admin_inline_rejects_inverted_window(self):
        HoursFormSet = inlineformset_factory(
            Ground, OperatingHours,
            fields=('day_of_week', 'is_closed', 'start_time', 'end_time', 'slot_duration_minutes'),
            extra=1,
        )
        formset = HoursFormSet({
            'operating_hours-TOTAL_FORMS': '1',
            'operating_hours-INITIAL_FORMS': '0',
            'operating_hours-0-day_of_week': '0',
            'operating_hours-0-start_time': '20:00',
            'operating_hours-0-end_time': '08:00',
            'operating_hours-0-slot_duration_minutes': '60',
        }, instance=self.ground)

        self.assertFalse(formset.is_valid())
        self.assertIn('Start time must be before end time', str(formset.errors))


@override_settings(IDENTITY_TOKEN_VERIFIER=TEST_VERIFIER, ADMIN_EMAILS=['owner@example.com'])
class GroundApiTests(TestCase):

    def setUp(self):
        self.ground = make_ground()
        self.cricket = make_ground(name='Rawalpindi Cricket Club', category='Cricket')

    def put(self, url, payload, **headers):
        return self.client.put(url, data=json.dumps(payload), content_type='application/json', **headers)

    def test_list_and_filter(self):
        self.assertEqual(len(self.client.get('/api/grounds').json()), 2)

        cricket = self.client.get('/api/grounds', {'category': 'Cricket'}).json()
        self.assertEqual([g['name'] for g in cricket], ['Rawalpindi Cricket Club'])
        self.assertEqual(cricket[0]['pricePerHour'], '15000.00')

    def test_detail_includes_hours(self):
        body = self.client.get(f'/api/grounds/{self.ground.id}').json()

        self.assertEqual(len(body['operatingHours']), 7)
        self.assertEqual(body['operatingHours'][0]['dayName'], 'Monday')
        self.assertEqual(body['operatingHours'][0]['startTime'], '06:00')

        self.assertEqual(self.client.get('/api/grounds/9999').status_code, 404)

    def test_hours_listing_needs_identity(self):
        url = f'/api/operating-hours/ground/{self.ground.id}'

        self.assertEqual(self.client.get(url).status_code, 401)
        self.assertEqual(len(self.client.get(url, **bearer('user-1')).json()), 7)

    def test_update_day_is_admin_only(self):
        url = f'/api/operating-hours/ground/{self.ground.id}/day/5'
        payload = {'isClosed': False, 'startTime': '08:00', 'endTime': '20:00', 'slotDurationMinutes': 90}

        self.assertEqual(self.put(url, payload, **bearer('user-1')).status_code, 403)

        response = self.put(url, payload, **bearer('owner', 'Owner@Example.com'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['hours']['slotDurationMinutes'], 90)
        self.assertEqual(OperatingHoursStore().get(self.ground.id, 5).start_time, time(8, 0))

    def test_update_day_validation(self):
        url = f'/api/operating-hours/ground/{self.ground.id}/day/5'
        admin = bearer('ops', admin=True)

        self.assertEqual(self.put(url, {'startTime': '20:00', 'endTime': '08:00'}, **admin).status_code, 400)
        self.assertEqual(self.put(f'/api/operating-hours/ground/{self.ground.id}/day/9', {'isClosed': True}, **admin).status_code, 400)
        self.assertEqual(self.put('/api/operating-hours/ground/9999/day/1', {'isClosed': True}, **admin).status_code, 404)

    def test_batch_update(self):
        url = f'/api/operating-hours/ground/{self.ground.id}/batch'
        admin = bearer('ops', admin=True)

        response = self.put(url, {'hours': [
            {'dayOfWeek': 6, 'isClosed': True},
            {'day_of_week': 0, 'startTime': '10:00', 'endTime': '22:00'},
        ]}, **admin)
        self.assertEqual(response.status_code, 200)
        self.assertEqual([h['dayOfWeek'] for h in response.json()['hours']], [0, 6])
        self.assertTrue(OperatingHoursStore().get(self.ground.id, 6).is_closed)

    def test_batch_rejects_bad_entries(self):
        url = f'/api/operating-hours/ground/{self.ground.id}/batch'
        admin = bearer('ops', admin=True)

        self.assertEqual(self.put(url, {'hours': []}, **admin).status_code, 400)
        self.assertEqual(self.put(url, {'hours': [{'dayOfWeek': 8, 'isClosed': True}]}, **admin).status_code, 400)
        duplicate = self.put(url, {'hours': [{'dayOfWeek': 1, 'isClosed': True}, {'dayOfWeek': 1, 'isClosed': True}]}, **admin)
        self.assertEqual(duplicate.status_code, 400)
        self.assertFalse(OperatingHoursStore().get(self.ground.id, 1).is_closed)


class SeedGroundsCommandTests(TestCase):

    def test_creates_sample_grounds_once(self):
        out = StringIO()
        call_command('seed_grounds', stdout=out)

        self.assertEqual(Ground.objects.count(), 5)
        self.assertEqual(OperatingHours.objects.count(), 35)

        call_command('seed_grounds', stdout=StringIO())
        self.assertEqual(Ground.objects.count(), 5)

    def test_hours_only_backfills(self):
        ground = Ground.objects.create(name='Bare', city='Karachi', location='DHA', price_per_hour=Decimal('5000'))
        out = StringIO()

        call_command('seed_grounds', '--hours-only', stdout=out)

        self.assertEqual(Ground.objects.count(), 1)
        self.assertEqual(OperatingHours.objects.filter(ground=ground).count(), 7)
        self.assertIn('7 operating-hours rules added', out.getvalue())
