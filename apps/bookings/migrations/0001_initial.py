import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('play_sessions', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Booking',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('booking_code', models.CharField(editable=False, max_length=12, unique=True)),
                ('status', models.CharField(choices=[('pending_payment', 'Pending payment'), ('confirmed', 'Confirmed'), ('failed_payment', 'Payment failed'), ('failed_overbooked', 'Overbooked'), ('failed_event_not_found', 'Session not found'), ('cancelled', 'Cancelled')], default='pending_payment', max_length=32)),
                ('payment_status', models.CharField(choices=[('unpaid', 'Unpaid'), ('paid', 'Paid'), ('paid_pending_refund', 'Paid, refund owed'), ('refund_pending', 'Refund requested'), ('refunded', 'Refunded')], default='unpaid', max_length=32)),
                ('payment_intent_id', models.CharField(blank=True, db_index=True, max_length=255)),
                ('price_cents', models.PositiveIntegerField(default=0)),
                ('currency', models.CharField(default='usd', max_length=3)),
                ('platform_fee_cents', models.PositiveIntegerField(default=0)),
                ('venue_amount_cents', models.PositiveIntegerField(default=0)),
                ('coach_amount_cents', models.PositiveIntegerField(default=0)),
                ('confirmed_at', models.DateTimeField(blank=True, null=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('session', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='bookings', to='play_sessions.session')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='bookings', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Booking',
                'verbose_name_plural': 'Bookings',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['session', 'status'], name='bookings_bo_session_3c1b2e_idx'),
                    models.Index(fields=['user', 'status'], name='bookings_bo_user_id_8f2a4d_idx'),
                    models.Index(fields=['payment_status'], name='bookings_bo_payment_5e7c91_idx'),
                ],
            },
        ),
    ]
