from django.core.management.base import BaseCommand, CommandError
from django.core.validators import validate_email
from django.core.exceptions import ValidationError

from accounts.models import AdminUser


class Command(BaseCommand):
    help = 'Add an e-mail address to the persisted admin roster'

    def add_arguments(self, parser):
        parser.add_argument('email')
        parser.add_argument('--name', default='')

    def handle(self, *args, **options):
        email = options['email'].strip().lower()
        try:
            validate_email(email)
        except ValidationError:
            raise CommandError(f'Invalid email format: {email}')

        if AdminUser.objects.filter(email=email).exists():
            self.stdout.write(self.style.WARNING(f'{email} is already an admin'))
            return

        AdminUser.objects.create(email=email, name=options['name'])
        self.stdout.write(self.style.SUCCESS(f'Admin {email} created successfully!'))
