import logging
import threading

from django.conf import settings
from django.core.mail import send_mail
from django.db import connection

logger = logging.getLogger(__name__)


def _message_for(booking):
    ground = booking.ground
    subject = f"New Booking: {ground.name} - {booking.date} {booking.slot}"
    body = "\n".join([
        "New Booking Received",
        "",
        f"Ground: {ground.name}",
        f"Location: {ground.location}, {ground.city}",
        f"Date: {booking.date}",
        f"Time Slot: {booking.slot}",
        f"Customer Name: {booking.customer_name}",
        f"Customer Phone: {booking.customer_phone}",
        f"Price: Rs. {booking.price_at_booking}",
        f"Booking ID: {booking.id}",
        "",
        "This is an automated email. Do not reply to this message.",
    ])
    return subject, body


def notify_booking_created(booking):
    """E-mail the operators about a new booking. Never raises."""
    recipients = list(settings.ADMIN_EMAILS)
    if not recipients:
        logger.warning('No admin emails configured in ADMIN_EMAILS')
        return False

    from_email = getattr(settings, 'DEFAULT_FROM_EMAIL', None) or getattr(settings, 'EMAIL_HOST_USER', None)
    try:
        subject, body = _message_for(booking)
        send_mail(subject, body, from_email, recipients, fail_silently=False)
    except Exception:
        logger.exception('Failed to send booking notification for booking %s', booking.id)
        return False

    logger.info('Booking notification sent for booking %s to %s', booking.id, ', '.join(recipients))
    return True


def _notify_in_thread(booking):
    try:
        notify_booking_created(booking)
    finally:
        connection.close()


def dispatch_booking_notification(booking):
    """Fire-and-forget: with NOTIFICATIONS_ASYNC the mail goes out on a daemon thread."""
    if getattr(settings, 'NOTIFICATIONS_ASYNC', True):
        threading.Thread(
            target=_notify_in_thread,
            args=(booking,),
            name=f'booking-notification-{booking.id}',
            daemon=True,
        ).start()
    else:
        notify_booking_created(booking)
