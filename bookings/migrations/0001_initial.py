import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('grounds', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Booking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField()),
                ('slot', models.CharField(max_length=5)),
                ('customer_name', models.CharField(max_length=100)),
                ('customer_phone', models.CharField(max_length=20)),
                ('user_uid', models.CharField(blank=True, db_index=True, max_length=128)),
                ('status', models.CharField(choices=[('CONFIRMED', 'Confirmed'), ('CANCELLED', 'Cancelled')], default='CONFIRMED', max_length=10)),
                ('price_at_booking', models.DecimalField(decimal_places=2, max_digits=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('ground', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='bookings', to='grounds.ground')),
            ],
            options={
                'ordering': ['-date', 'slot'],
                'indexes': [models.Index(fields=['ground', 'date'], name='booking_ground_date_idx')],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('status', 'CONFIRMED')), fields=('ground', 'date', 'slot'), name='unique_confirmed_booking_per_slot'),
                ],
            },
        ),
        migrations.CreateModel(
            name='BookingActivityLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('CREATED', 'Created'), ('CANCELLED', 'Cancelled')], max_length=10)),
                ('performed_by', models.CharField(blank=True, max_length=128)),
                ('timestamp', models.DateTimeField(auto_now_add=True)),
                ('booking', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='activity', to='bookings.booking')),
            ],
            options={
                'ordering': ['timestamp'],
            },
        ),
    ]
