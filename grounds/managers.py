from datetime import time

from django.db import models, transaction

DEFAULT_START_TIME = time(6, 0)
DEFAULT_END_TIME = time(23, 0)
DEFAULT_SLOT_DURATION = 60


class OperatingHoursManager(models.Manager):

    def seed_defaults(self, ground):
        """Create the default open-every-day rule for each weekday the ground lacks.

        Existing rules are left untouched, so this is safe to re-run.
        """
        existing = set(self.filter(ground=ground).values_list('day_of_week', flat=True))
        missing = [
            self.model(
                ground=ground,
                day_of_week=day,
                is_closed=False,
                start_time=DEFAULT_START_TIME,
                end_time=DEFAULT_END_TIME,
                slot_duration_minutes=DEFAULT_SLOT_DURATION,
            )
            for day in range(7)
            if day not in existing
        ]
        self.bulk_create(missing)
        return len(missing)


class GroundManager(models.Manager):

    def create_with_default_hours(self, **fields):
        from .models import OperatingHours

        with transaction.atomic():
            ground = self.create(**fields)
            OperatingHours.objects.seed_defaults(ground)
        return ground
