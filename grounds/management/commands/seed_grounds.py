from decimal import Decimal

from django.core.management.base import BaseCommand

from grounds.models import Ground, OperatingHours

SAMPLE_GROUNDS = [
    {
        'name': 'Karachi United Stadium',
        'city': 'Karachi',
        'location': 'Clifton Block 5',
        'price_per_hour': Decimal('12000'),
        'category': 'Football',
        'description': 'Full-size floodlit football ground with synthetic turf and changing facilities.',
    },
    {
        'name': 'Dreamworld Cricket Arena',
        'city': 'Karachi',
        'location': 'Gadap Town, Super Highway',
        'price_per_hour': Decimal('18000'),
        'category': 'Cricket',
        'description': 'Cricket ground for night matches with LED lighting and turf wicket.',
    },
    {
        'name': 'Lahore Sports Complex',
        'city': 'Lahore',
        'location': 'Gaddafi Stadium vicinity',
        'price_per_hour': Decimal('15000'),
        'category': 'Football',
        'description': 'Multipurpose ground for football and cricket with seating and parking.',
    },
    {
        'name': 'Islamabad F6 Community Ground',
        'city': 'Islamabad',
        'location': 'Sector F-6/2',
        'price_per_hour': Decimal('9000'),
        'category': 'Futsal',
        'description': 'Community-run grass ground suited to football and futsal.',
    },
    {
        'name': 'Rawalpindi Cricket Club',
        'city': 'Rawalpindi',
        'location': 'Peshawar Road',
        'price_per_hour': Decimal('11000'),
        'category': 'Cricket',
        'description': 'Box cricket facility with practice nets and an indoor lounge.',
    },
]


class Command(BaseCommand):
    help = 'Create the sample grounds (if none exist) and backfill missing operating hours'

    def add_arguments(self, parser):
        parser.add_argument('--hours-only', action='store_true', help='Only backfill operating hours')

    def handle(self, *args, **options):
        if not options['hours_only'] and not Ground.objects.exists():
            for fields in SAMPLE_GROUNDS:
                Ground.objects.create_with_default_hours(**fields)
            self.stdout.write(self.style.SUCCESS(f'Created {len(SAMPLE_GROUNDS)} grounds.'))

        added = 0
        for ground in Ground.objects.all():
            added += OperatingHours.objects.seed_defaults(ground)

        self.stdout.write(self.style.SUCCESS(f'Done. {added} operating-hours rules added.'))
