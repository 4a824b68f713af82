from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q

from .managers import GroundManager, OperatingHoursManager


class Ground(models.Model):
    name = models.CharField(max_length=100)
    city = models.CharField(max_length=100)
    location = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=50, blank=True)

    # booking core reads this at booking time and snapshots it on the Booking
    price_per_hour = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
    )

    created_at = models.DateTimeField(auto_now_add=True)

    objects = GroundManager()

    class Meta:
        ordering = ['city', 'name']

    def __str__(self):
        return f"{self.name} ({self.city})"


class OperatingHours(models.Model):
    DAY_CHOICES = (
        (0, 'Monday'),
        (1, 'Tuesday'),
        (2, 'Wednesday'),
        (3, 'Thursday'),
        (4, 'Friday'),
        (5, 'Saturday'),
        (6, 'Sunday'),
    )

    ground = models.ForeignKey(Ground, on_delete=models.CASCADE, related_name='operating_hours')
    day_of_week = models.PositiveSmallIntegerField(choices=DAY_CHOICES)

    is_closed = models.BooleanField(default=False)
    start_time = models.TimeField(null=True, blank=True)
    end_time = models.TimeField(null=True, blank=True)
    slot_duration_minutes = models.PositiveSmallIntegerField(
        default=60,
        validators=[MinValueValidator(15), MaxValueValidator(480)],
    )

    updated_at = models.DateTimeField(auto_now=True)

    objects = OperatingHoursManager()

    class Meta:
        ordering = ['ground', 'day_of_week']
        verbose_name_plural = 'operating hours'
        constraints = [
            models.UniqueConstraint(
                fields=['ground', 'day_of_week'],
                name='unique_operating_hours_per_ground_day',
            ),
            models.CheckConstraint(
                condition=Q(day_of_week__gte=0) & Q(day_of_week__lte=6),
                name='operating_hours_day_of_week_range',
            ),
        ]

    @property
    def is_open(self):
        return not self.is_closed and self.start_time is not None and self.end_time is not None

    @property
    def day_name(self):
        return self.get_day_of_week_display()

    def clean(self):
        from .hours import HoursRule, InvalidOperatingHours

        if self.day_of_week is None or self.slot_duration_minutes is None:
            return
        rule = HoursRule(
            is_closed=self.is_closed,
            start_time=self.start_time,
            end_time=self.end_time,
            slot_duration_minutes=self.slot_duration_minutes,
        )
        try:
            rule.validate(self.day_of_week)
        except InvalidOperatingHours as exc:
            raise ValidationError(str(exc))

    def __str__(self):
        if self.is_closed:
            return f"{self.ground.name} - {self.day_name}: closed"
        return f"{self.ground.name} - {self.day_name}: {self.start_time}-{self.end_time}"
