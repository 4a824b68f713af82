import datetime
import json
import threading
from datetime import date, time, timedelta
from decimal import Decimal
from unittest import mock

from django.db import IntegrityError, connection, transaction
from django.test import TestCase, TransactionTestCase, override_settings

from accounts.models import UserProfile
from accounts.testing import TEST_VERIFIER, bearer
from grounds.hours import HoursRule, OperatingHoursStore
from grounds.models import Ground, OperatingHours

from .availability import AvailabilityResolver
from .clock import Clock, fixed_clock
from .exceptions import (
    AlreadyCancelled,
    BookingNotFound,
    GroundNotFound,
    InvalidDate,
    InvalidInput,
    OutsideOperatingHours,
    PastDate,
    PastSlot,
    ProfileIncomplete,
    SlotAlreadyBooked,
)
from .ledger import BookingLedger
from .models import Booking, BookingActivityLog
from .services import BookingWorkflow
from .slot_generation import generate_slots, parse_slot, to_minutes

PKT = datetime.timezone(timedelta(hours=5))

# Monday
TODAY = date(2030, 1, 7)
TOMORROW = TODAY + timedelta(days=1)
WEDNESDAY = date(2030, 1, 9)


def clock_at(hour, minute, day=TODAY):
    return fixed_clock(datetime.datetime(day.year, day.month, day.day, hour, minute, tzinfo=PKT))


def make_ground(name='Karachi United Stadium', price='12000'):
    return Ground.objects.create_with_default_hours(
        name=name,
        city='Karachi',
        location='Clifton Block 5',
        category='Football',
        price_per_hour=Decimal(price),
    )


class SlotGenerationTests(TestCase):

    def test_hourly_slots_cover_default_window(self):
        slots = generate_slots(time(6, 0), time(23, 0), 60)

        self.assertEqual(len(slots), 17)
        self.assertEqual(slots[0], '06:00')
        self.assertEqual(slots[-1], '22:00')

    def test_no_trailing_partial_slot(self):
        slots = generate_slots('06:00', '23:00', 90)

        self.assertEqual(slots[-1], '21:00')
        self.assertNotIn('22:00', slots)
        self.assertNotIn('22:30', slots)

    def test_every_slot_is_on_the_grid_and_fits(self):
        for duration in (15, 45, 60, 90, 120, 480):
            start, end = to_minutes('06:00'), to_minutes('23:00')
            for slot in generate_slots('06:00', '23:00', duration):
                minutes = parse_slot(slot)
                self.assertLessEqual(minutes + duration, end)
                self.assertEqual((minutes - start) % duration, 0)

    def test_exact_fit_includes_last_slot(self):
        self.assertEqual(generate_slots('10:00', '12:00', 60), ['10:00', '11:00'])

    def test_duration_longer_than_window_yields_nothing(self):
        self.assertEqual(generate_slots('10:00', '10:30', 60), [])

    def test_same_inputs_same_sequence(self):
        self.assertEqual(
            generate_slots('07:15', '20:00', 45),
            generate_slots(time(7, 15), time(20, 0), 45),
        )

    def test_non_positive_duration_rejected(self):
        with self.assertRaises(ValueError):
            generate_slots('06:00', '23:00', 0)

    def test_parse_slot_rejects_malformed_times(self):
        for value in ('9:00', '24:00', '10:60', '10-00', '', None, 1000):
            with self.assertRaises(ValueError):
                parse_slot(value)


class ClockTests(TestCase):

    def test_now_is_expressed_in_fixed_offset(self):
        clock = Clock(source=lambda: datetime.datetime(2030, 1, 6, 20, 0, tzinfo=datetime.timezone.utc))

        self.assertEqual(clock.today(), TODAY)
        self.assertEqual(clock.minute_of_day(), 60)
        self.assertEqual(clock.now().utcoffset(), timedelta(hours=5))

    def test_has_started_is_date_relative(self):
        clock = clock_at(12, 30)

        self.assertTrue(clock.has_started(TODAY, to_minutes('12:00')))
        self.assertTrue(clock.has_started(TODAY, to_minutes('12:30')))
        self.assertFalse(clock.has_started(TODAY, to_minutes('13:00')))
        self.assertFalse(clock.has_started(TOMORROW, to_minutes('12:00')))
        self.assertTrue(clock.has_started(TODAY - timedelta(days=1), to_minutes('23:00')))


class BookingLedgerTests(TestCase):

    def setUp(self):
        self.ground = make_ground()
        self.ledger = BookingLedger()

    def confirm(self, slot='10:00', day=TOMORROW, uid='user-1'):
        return self.ledger.try_confirm(
            self.ground.id, day, slot,
            customer_name='Ali',
            customer_phone='03001234567',
            user_uid=uid,
            price_at_booking=self.ground.price_per_hour,
        )

    def test_try_confirm_records_booking_and_activity(self):
        booking = self.confirm()

        self.assertEqual(booking.status, Booking.CONFIRMED)
        self.assertEqual(booking.price_at_booking, Decimal('12000'))
        self.assertEqual(
            list(BookingActivityLog.objects.filter(booking=booking).values_list('action', 'performed_by')),
            [('CREATED', 'user-1')],
        )

    def test_second_confirmation_of_same_slot_is_rejected(self):
        self.confirm()

        with self.assertRaises(SlotAlreadyBooked) as ctx:
            self.confirm(uid='user-2')

        self.assertEqual(ctx.exception.slots, ['10:00'])
        self.assertEqual(Booking.objects.filter(status=Booking.CONFIRMED).count(), 1)

    def test_unique_index_catches_writer_that_skipped_the_check(self):
        self.confirm()

        # simulate a concurrent writer whose existence check ran before the first commit
        with mock.patch.object(BookingLedger, 'is_booked', return_value=False):
            with self.assertRaises(SlotAlreadyBooked):
                self.confirm(uid='user-2')

        self.assertEqual(Booking.objects.filter(status=Booking.CONFIRMED).count(), 1)

    def test_storage_rejects_duplicate_confirmed_rows(self):
        self.confirm()

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Booking.objects.create(
                    ground=self.ground, date=TOMORROW, slot='10:00',
                    customer_name='B', customer_phone='1', price_at_booking=Decimal('1'),
                )

    def test_cancelled_rows_do_not_block_rebooking(self):
        first = self.confirm()
        self.ledger.cancel(first.id, performed_by='user-1')

        second = self.confirm(uid='user-2')

        self.assertNotEqual(first.id, second.id)
        self.assertEqual(Booking.objects.filter(date=TOMORROW, slot='10:00').count(), 2)

    def test_cancel_is_one_way(self):
        booking = self.confirm()

        cancelled = self.ledger.cancel(booking.id, performed_by='user-1')
        self.assertEqual(cancelled.status, Booking.CANCELLED)
        self.assertIsNotNone(cancelled.cancelled_at)

        with self.assertRaises(AlreadyCancelled):
            self.ledger.cancel(booking.id)

        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.CANCELLED)
        self.assertEqual(
            list(booking.activity.order_by('id').values_list('action', flat=True)),
            ['CREATED', 'CANCELLED'],
        )

    def test_cancel_unknown_booking(self):
        with self.assertRaises(BookingNotFound):
            self.ledger.cancel(424242)


class AvailabilityResolverTests(TestCase):

    def setUp(self):
        self.ground = make_ground()
        self.ledger = BookingLedger()
        self.resolver = AvailabilityResolver(clock=clock_at(12, 30))

    def book(self, slot, day=TOMORROW):
        return self.ledger.try_confirm(
            self.ground.id, day, slot, 'Ali', '0300', 'user-1', self.ground.price_per_hour,
        )

    def available(self, slots):
        return {s.slot for s in slots if s.available}

    def test_future_date_offers_every_slot(self):
        slots = self.resolver.resolve(self.ground.id, TOMORROW.isoformat())

        self.assertEqual(len(slots), 17)
        self.assertTrue(all(s.available for s in slots))
        self.assertEqual([s.slot for s in slots], sorted(s.slot for s in slots))

    def test_booked_slot_is_unavailable(self):
        self.book('10:00')

        slots = self.resolver.resolve(self.ground.id, TOMORROW.isoformat())

        self.assertNotIn('10:00', self.available(slots))
        self.assertIn('11:00', self.available(slots))

    def test_elapsed_slots_only_filtered_today(self):
        today = self.available(self.resolver.resolve(self.ground.id, TODAY.isoformat()))
        tomorrow = self.available(self.resolver.resolve(self.ground.id, TOMORROW.isoformat()))

        self.assertNotIn('12:00', today)
        self.assertNotIn('06:00', today)
        self.assertIn('13:00', today)
        self.assertIn('12:00', tomorrow)
        self.assertIn('06:00', tomorrow)

    def test_slot_starting_now_is_unavailable(self):
        resolver = AvailabilityResolver(clock=clock_at(13, 0))

        slots = self.available(resolver.resolve(self.ground.id, TODAY.isoformat()))

        self.assertNotIn('13:00', slots)
        self.assertIn('14:00', slots)

    def test_closed_day_is_empty_even_with_bookings(self):
        self.book('10:00')
        OperatingHoursStore().upsert(self.ground.id, TOMORROW.weekday(), HoursRule(is_closed=True))

        self.assertEqual(self.resolver.resolve(self.ground.id, TOMORROW.isoformat()), [])

    def test_missing_rule_is_treated_as_closed(self):
        OperatingHours.objects.filter(ground=self.ground, day_of_week=TOMORROW.weekday()).delete()

        self.assertEqual(self.resolver.resolve(self.ground.id, TOMORROW.isoformat()), [])

    def test_uses_rule_for_the_dates_weekday(self):
        OperatingHoursStore().upsert(
            self.ground.id, 2,
            HoursRule(start_time=time(8, 0), end_time=time(12, 0), slot_duration_minutes=90),
        )

        slots = self.resolver.resolve(self.ground.id, WEDNESDAY.isoformat())

        self.assertEqual([s.slot for s in slots], ['08:00', '09:30'])

    def test_cancellation_frees_the_slot(self):
        booking = self.book('15:00', day=TODAY)
        self.assertNotIn('15:00', self.available(self.resolver.resolve(self.ground.id, TODAY.isoformat())))

        self.ledger.cancel(booking.id)

        self.assertIn('15:00', self.available(self.resolver.resolve(self.ground.id, TODAY.isoformat())))

    def test_rejects_malformed_dates(self):
        for value in ('2030-13-01', '2030-1-7', '07-01-2030', 'tomorrow', ''):
            with self.assertRaises(InvalidDate):
                self.resolver.resolve(self.ground.id, value)

    def test_rejects_past_dates(self):
        with self.assertRaises(PastDate):
            self.resolver.resolve(self.ground.id, (TODAY - timedelta(days=1)).isoformat())

    def test_unknown_ground(self):
        with self.assertRaises(GroundNotFound):
            self.resolver.resolve(9999, TOMORROW.isoformat())


class BookingWorkflowTests(TestCase):

    def setUp(self):
        self.ground = make_ground()
        self.notifier = mock.Mock()
        self.workflow = BookingWorkflow(clock=clock_at(12, 30), notifier=self.notifier)
        UserProfile.objects.create(user_uid='user-1', name='Ali', phone='03001234567')

    def book(self, slots, day=TOMORROW, uid='user-1', ground_id=None):
        return self.workflow.book(uid, ground_id or self.ground.id, day.isoformat(), slots)

    def test_profile_gate_then_success(self):
        with self.assertRaises(ProfileIncomplete):
            self.book(['10:00'], uid='newcomer')

        UserProfile.objects.create(user_uid='newcomer', name='A', phone='0300')
        [booking] = self.book(['10:00'], uid='newcomer')

        self.assertEqual(booking.status, Booking.CONFIRMED)
        self.assertEqual(booking.price_at_booking, self.ground.price_per_hour)
        self.assertEqual(booking.customer_name, 'A')
        self.assertEqual(booking.customer_phone, '0300')
        self.assertEqual(booking.user_uid, 'newcomer')

    def test_blank_profile_fields_fail_the_gate(self):
        UserProfile.objects.create(user_uid='blank', name='  ', phone='0300')

        with self.assertRaises(ProfileIncomplete):
            self.book(['10:00'], uid='blank')

    def test_price_snapshot_survives_price_change(self):
        [booking] = self.book(['10:00'])

        self.ground.price_per_hour = Decimal('15000')
        self.ground.save()

        booking.refresh_from_db()
        self.assertEqual(booking.price_at_booking, Decimal('12000'))

    def test_structural_validation(self):
        cases = [
            (None, TOMORROW.isoformat(), ['10:00']),
            (self.ground.id, None, ['10:00']),
            (self.ground.id, TOMORROW.isoformat(), []),
            (self.ground.id, '2030/01/08', ['10:00']),
            (self.ground.id, TOMORROW.isoformat(), ['25:00']),
            (self.ground.id, TOMORROW.isoformat(), ['9:00']),
            (self.ground.id, TOMORROW.isoformat(), ['10:00', '10:00']),
            (self.ground.id, TOMORROW.isoformat(), {'slot': '10:00'}),
            ('abc', TOMORROW.isoformat(), ['10:00']),
        ]
        for ground_id, day, slots in cases:
            with self.assertRaises(InvalidInput):
                self.workflow.book('user-1', ground_id, day, slots)

    def test_too_many_slots(self):
        workflow = BookingWorkflow(clock=clock_at(12, 30), notifier=self.notifier, max_slots=2)

        with self.assertRaises(InvalidInput):
            workflow.book('user-1', self.ground.id, TOMORROW.isoformat(), ['10:00', '11:00', '12:00'])

    def test_past_date_and_elapsed_slots(self):
        with self.assertRaises(PastSlot):
            self.book(['10:00'], day=TODAY - timedelta(days=1))

        with self.assertRaises(PastSlot) as ctx:
            self.book(['12:00', '14:00'], day=TODAY)
        self.assertEqual(ctx.exception.details['slots'], ['12:00'])

        [booking] = self.book(['13:00'], day=TODAY)
        self.assertEqual(booking.slot, '13:00')

    def test_timing_is_checked_before_profile(self):
        with self.assertRaises(PastSlot):
            self.book(['10:00'], day=TODAY, uid='nobody')

    def test_unknown_ground(self):
        with self.assertRaises(GroundNotFound):
            self.book(['10:00'], ground_id=9999)

    def test_profile_is_checked_before_ground(self):
        with self.assertRaises(ProfileIncomplete):
            self.book(['10:00'], ground_id=9999, uid='nobody')

    def test_outside_operating_hours(self):
        for slots in (['05:00'], ['23:00'], ['10:30']):
            with self.assertRaises(OutsideOperatingHours):
                self.book(slots)

    def test_closed_and_unconfigured_days(self):
        OperatingHoursStore().upsert(self.ground.id, TOMORROW.weekday(), HoursRule(is_closed=True))
        with self.assertRaises(OutsideOperatingHours):
            self.book(['10:00'])

        OperatingHours.objects.filter(ground=self.ground, day_of_week=WEDNESDAY.weekday()).delete()
        with self.assertRaises(OutsideOperatingHours):
            self.book(['10:00'], day=WEDNESDAY)

    def test_multi_slot_booking_is_chronological(self):
        created = self.book(['12:00', '10:00', '11:00'])

        self.assertEqual([b.slot for b in created], ['10:00', '11:00', '12:00'])
        self.assertEqual(len({b.price_at_booking for b in created}), 1)

    def test_multi_slot_conflict_commits_nothing(self):
        self.book(['11:00'])

        with self.assertRaises(SlotAlreadyBooked) as ctx:
            self.book(['10:00', '11:00', '12:00'])

        self.assertEqual(ctx.exception.slots, ['11:00'])
        self.assertEqual(
            list(Booking.objects.filter(date=TOMORROW).values_list('slot', flat=True)),
            ['11:00'],
        )

    def test_reports_every_conflicting_slot(self):
        self.book(['10:00', '12:00'])

        with self.assertRaises(SlotAlreadyBooked) as ctx:
            self.book(['10:00', '11:00', '12:00'])

        self.assertEqual(ctx.exception.slots, ['10:00', '12:00'])
        self.assertIn('10:00, 12:00', ctx.exception.message)

    def test_notifies_once_per_booking_after_commit(self):
        with self.captureOnCommitCallbacks(execute=True):
            created = self.book(['10:00', '11:00'])

        self.assertEqual(self.notifier.call_count, 2)
        self.notifier.assert_any_call(created[0])


class ConcurrentBookingTests(TransactionTestCase):

    def setUp(self):
        self.ground = make_ground()
        self.clock = clock_at(12, 30)
        for n in range(5):
            UserProfile.objects.create(user_uid=f'user-{n}', name=f'Player {n}', phone=f'030000000{n}')

    def test_only_one_concurrent_booking_wins(self):
        # with IMMEDIATE transactions SQLite serialises these writers on its lock,
        # so the partial unique index path is covered by BookingLedgerTests instead
        attempts = 5
        barrier = threading.Barrier(attempts)
        outcomes = []
        lock = threading.Lock()

        def attempt(uid):
            workflow = BookingWorkflow(clock=self.clock, notifier=lambda booking: None)
            try:
                barrier.wait()
                workflow.book(uid, self.ground.id, TOMORROW.isoformat(), ['18:00'])
                result = 'booked'
            except SlotAlreadyBooked:
                result = 'conflict'
            except Exception as exc:
                result = f'error: {exc!r}'
            finally:
                connection.close()
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=attempt, args=(f'user-{n}',)) for n in range(attempts)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)

        self.assertEqual(sorted(outcomes), ['booked'] + ['conflict'] * (attempts - 1))
        self.assertEqual(
            Booking.objects.filter(ground=self.ground, date=TOMORROW, slot='18:00', status=Booking.CONFIRMED).count(),
            1,
        )

    def test_failing_notifier_does_not_undo_booking(self):
        def broken_notifier(booking):
            raise RuntimeError('mail server down')

        workflow = BookingWorkflow(clock=self.clock, notifier=broken_notifier)
        [booking] = workflow.book('user-0', self.ground.id, TOMORROW.isoformat(), ['19:00'])

        self.assertTrue(Booking.objects.filter(pk=booking.pk, status=Booking.CONFIRMED).exists())


@override_settings(IDENTITY_TOKEN_VERIFIER=TEST_VERIFIER, NOTIFICATIONS_ASYNC=False)
class BookingNotificationFailureApiTests(TransactionTestCase):

    def setUp(self):
        self.ground = make_ground()
        self.tomorrow = (Clock().today() + timedelta(days=1)).isoformat()
        UserProfile.objects.create(user_uid='user-1', name='A', phone='03001234567')

    def test_failing_notifier_still_reports_created(self):
        payload = {'groundId': self.ground.id, 'date': self.tomorrow, 'slots': ['20:00', '21:00']}

        with mock.patch(
            'bookings.services.dispatch_booking_notification',
            side_effect=RuntimeError('mail server down'),
        ) as notifier:
            response = self.client.post(
                '/api/bookings', data=json.dumps(payload), content_type='application/json', **bearer('user-1'),
            )

        self.assertEqual(response.status_code, 201)
        self.assertEqual([b['slot'] for b in response.json()['bookings']], ['20:00', '21:00'])
        self.assertEqual(notifier.call_count, 2)
        self.assertEqual(Booking.objects.filter(status=Booking.CONFIRMED).count(), 2)


@override_settings(IDENTITY_TOKEN_VERIFIER=TEST_VERIFIER, NOTIFICATIONS_ASYNC=False, ADMIN_EMAILS=[])
class BookingApiTests(TestCase):

    def setUp(self):
        self.ground = make_ground()
        self.tomorrow = (Clock().today() + timedelta(days=1)).isoformat()

    def post_booking(self, payload, uid='user-1'):
        return self.client.post(
            '/api/bookings', data=json.dumps(payload), content_type='application/json', **bearer(uid),
        )

    def test_availability_is_public(self):
        response = self.client.get(f'/api/grounds/{self.ground.id}/availability', {'date': self.tomorrow})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['groundId'], self.ground.id)
        self.assertEqual(body['date'], self.tomorrow)
        self.assertEqual(len(body['slots']), 17)
        self.assertEqual(body['slots'][0], {'slot': '06:00', 'available': True})

    def test_availability_errors(self):
        url = f'/api/grounds/{self.ground.id}/availability'

        self.assertEqual(self.client.get(url).status_code, 400)
        self.assertEqual(self.client.get(url, {'date': 'not-a-date'}).json()['code'], 'INVALID_DATE')
        self.assertEqual(self.client.get(url, {'date': '2000-01-01'}).json()['code'], 'PAST_DATE')
        self.assertEqual(
            self.client.get('/api/grounds/9999/availability', {'date': self.tomorrow}).status_code, 404,
        )

    def test_booking_requires_identity(self):
        response = self.client.post(
            '/api/bookings', data=json.dumps({}), content_type='application/json',
        )

        self.assertEqual(response.status_code, 401)

    def test_profile_required_then_booking_succeeds(self):
        payload = {'groundId': self.ground.id, 'date': self.tomorrow, 'slots': ['22:00']}

        response = self.post_booking(payload)
        self.assertEqual(response.status_code, 428)
        self.assertEqual(response.json()['code'], 'PROFILE_REQUIRED')

        profile = self.client.put(
            '/api/profile', data=json.dumps({'name': 'A', 'phone': '03001234567'}),
            content_type='application/json', **bearer('user-1'),
        )
        self.assertEqual(profile.status_code, 200)

        response = self.post_booking(payload)
        self.assertEqual(response.status_code, 201)
        [booking] = response.json()['bookings']
        self.assertEqual(booking['status'], 'CONFIRMED')
        self.assertEqual(booking['slot'], '22:00')
        self.assertEqual(booking['userUid'], 'user-1')
        self.assertEqual(Decimal(booking['priceAtBooking']), Decimal('12000'))

    def test_single_slot_key_and_conflict(self):
        UserProfile.objects.create(user_uid='user-1', name='A', phone='1')
        UserProfile.objects.create(user_uid='user-2', name='B', phone='2')
        payload = {'groundId': self.ground.id, 'date': self.tomorrow, 'slot': '22:00'}

        self.assertEqual(self.post_booking(payload).status_code, 201)

        response = self.post_booking(payload, uid='user-2')
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()['slots'], ['22:00'])

        availability = self.client.get(f'/api/grounds/{self.ground.id}/availability', {'date': self.tomorrow})
        self.assertIn({'slot': '22:00', 'available': False}, availability.json()['slots'])

    def test_invalid_payloads(self):
        response = self.client.post(
            '/api/bookings', data='{oops', content_type='application/json', **bearer('user-1'),
        )
        self.assertEqual(response.status_code, 400)

        response = self.post_booking({'groundId': self.ground.id, 'date': self.tomorrow})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['code'], 'INVALID_INPUT')

    def test_cancel_flow(self):
        UserProfile.objects.create(user_uid='user-1', name='A', phone='1')
        booking_id = self.post_booking(
            {'groundId': self.ground.id, 'date': self.tomorrow, 'slots': ['21:00']},
        ).json()['bookings'][0]['id']
        url = f'/api/bookings/{booking_id}'

        self.assertEqual(self.client.delete(url, **bearer('intruder')).status_code, 403)

        response = self.client.delete(url, **bearer('user-1'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'success': True})

        again = self.client.delete(url, **bearer('user-1'))
        self.assertEqual(again.status_code, 409)
        self.assertEqual(again.json()['code'], 'ALREADY_CANCELLED')

        self.assertEqual(self.client.delete('/api/bookings/424242', **bearer('user-1')).status_code, 404)

    def test_admin_can_cancel_any_booking(self):
        UserProfile.objects.create(user_uid='user-1', name='A', phone='1')
        booking_id = self.post_booking(
            {'groundId': self.ground.id, 'date': self.tomorrow, 'slots': ['20:00']},
        ).json()['bookings'][0]['id']

        response = self.client.delete(f'/api/bookings/{booking_id}', **bearer('ops', 'ops@example.com', admin=True))

        self.assertEqual(response.status_code, 200)

    def test_listing_bookings(self):
        UserProfile.objects.create(user_uid='user-1', name='A', phone='1')
        self.post_booking({'groundId': self.ground.id, 'date': self.tomorrow, 'slots': ['20:00', '21:00']})

        mine = self.client.get('/api/bookings/mine', **bearer('user-1'))
        self.assertEqual([b['slot'] for b in mine.json()], ['20:00', '21:00'])
        self.assertEqual(self.client.get('/api/bookings/mine', **bearer('user-2')).json(), [])

        self.assertEqual(self.client.get('/api/bookings', **bearer('user-1')).status_code, 403)
        everything = self.client.get('/api/bookings', **bearer('ops', admin=True))
        self.assertEqual(everything.status_code, 200)
        self.assertEqual(everything.json()[0]['groundName'], self.ground.name)

    def test_unexpected_failure_is_generic(self):
        with mock.patch.object(BookingWorkflow, 'book', side_effect=RuntimeError('store unavailable')):
            with self.assertLogs('bookings.views', level='ERROR'):
                response = self.post_booking({'groundId': self.ground.id, 'date': self.tomorrow, 'slots': ['20:00']})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {'error': 'Internal server error.'})
