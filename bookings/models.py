from django.db import models
from django.db.models import Q

from grounds.models import Ground


class Booking(models.Model):
    CONFIRMED = 'CONFIRMED'
    CANCELLED = 'CANCELLED'
    STATUS = ((CONFIRMED, 'Confirmed'), (CANCELLED, 'Cancelled'))

    # bookings are never deleted, so a ground with history cannot be either
    ground = models.ForeignKey(Ground, on_delete=models.PROTECT, related_name='bookings')
    date = models.DateField()
    slot = models.CharField(max_length=5)

    customer_name = models.CharField(max_length=100)
    customer_phone = models.CharField(max_length=20)
    user_uid = models.CharField(max_length=128, blank=True, db_index=True)

    status = models.CharField(max_length=10, choices=STATUS, default=CONFIRMED)
    price_at_booking = models.DecimalField(max_digits=10, decimal_places=2)

    created_at = models.DateTimeField(auto_now_add=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-date', 'slot']
        indexes = [models.Index(fields=['ground', 'date'], name='booking_ground_date_idx')]
        constraints = [
            # the store, not application code, guarantees one confirmed booking per slot
            models.UniqueConstraint(
                fields=['ground', 'date', 'slot'],
                condition=Q(status='CONFIRMED'),
                name='unique_confirmed_booking_per_slot',
            ),
        ]

    @property
    def is_confirmed(self):
        return self.status == self.CONFIRMED

    def __str__(self):
        return f"Booking {self.id} - {self.ground_id} {self.date} {self.slot} ({self.status})"


class BookingActivityLog(models.Model):
    ACTIONS = (('CREATED', 'Created'), ('CANCELLED', 'Cancelled'))

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name='activity')
    action = models.CharField(max_length=10, choices=ACTIONS)
    performed_by = models.CharField(max_length=128, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['timestamp']

    def __str__(self):
        return f"{self.action} by {self.performed_by or 'system'} on {self.booking_id}"
