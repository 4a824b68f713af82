from datetime import date
from decimal import Decimal
from unittest import mock

from django.core import mail
from django.test import TestCase, override_settings

from bookings.models import Booking
from grounds.models import Ground

from .service import dispatch_booking_notification, notify_booking_created


@override_settings(
    ADMIN_EMAILS=['owner@example.com', 'ops@example.com'],
    EMAIL_BACKEND='django.core.mail.backends.locmem.EmailBackend',
    NOTIFICATIONS_ASYNC=False,
)
class BookingNotificationTests(TestCase):

    def setUp(self):
        ground = Ground.objects.create(
            name='Islamabad F6 Community Ground', city='Islamabad', location='Sector F-6/2',
            price_per_hour=Decimal('9000'),
        )
        self.booking = Booking.objects.create(
            ground=ground, date=date(2030, 1, 8), slot='18:00',
            customer_name='Ali Khan', customer_phone='03001234567', user_uid='user-1',
            price_at_booking=Decimal('9000'),
        )

    def test_mails_every_admin(self):
        self.assertTrue(notify_booking_created(self.booking))

        [message] = mail.outbox
        self.assertEqual(message.to, ['owner@example.com', 'ops@example.com'])
        self.assertIn('Islamabad F6 Community Ground', message.subject)
        self.assertIn('Customer Phone: 03001234567', message.body)
        self.assertIn('Price: Rs. 9000', message.body)

    @override_settings(ADMIN_EMAILS=[])
    def test_no_recipients_configured(self):
        with self.assertLogs('notifications.service', level='WARNING'):
            self.assertFalse(notify_booking_created(self.booking))

        self.assertEqual(mail.outbox, [])

    def test_mail_failure_is_logged_not_raised(self):
        with mock.patch('notifications.service.send_mail', side_effect=OSError('connection refused')):
            with self.assertLogs('notifications.service', level='ERROR'):
                self.assertFalse(notify_booking_created(self.booking))

    def test_dispatch_without_thread(self):
        with mock.patch('notifications.service.threading.Thread') as thread:
            dispatch_booking_notification(self.booking)

        thread.assert_not_called()
        self.assertEqual(len(mail.outbox), 1)

    @override_settings(NOTIFICATIONS_ASYNC=True)
    def test_dispatch_on_background_thread(self):
        with mock.patch('notifications.service.threading.Thread') as thread:
            dispatch_booking_notification(self.booking)

        thread.assert_called_once()
        self.assertTrue(thread.call_args.kwargs['daemon'])
        thread.return_value.start.assert_called_once_with()
