import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Session',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=255)),
                ('location', models.CharField(blank=True, max_length=255)),
                ('starts_at', models.DateTimeField()),
                ('ends_at', models.DateTimeField(blank=True, null=True)),
                ('max_attendees', models.PositiveIntegerField()),
                ('current_attendees', models.PositiveIntegerField(default=0)),
                ('waitlist_enabled', models.BooleanField(default=True)),
                ('waitlist_count', models.PositiveIntegerField(default=0)),
                ('cancellation_deadline_hours', models.PositiveIntegerField(default=24)),
                ('refund_percentage', models.PositiveSmallIntegerField(default=100, validators=[django.core.validators.MaxValueValidator(100)])),
                ('auto_promote_waitlist', models.BooleanField(default=True)),
                ('price_cents', models.PositiveIntegerField(default=0)),
                ('venue_cut_percent', models.PositiveSmallIntegerField(default=0, validators=[django.core.validators.MaxValueValidator(100)])),
                ('coach_cut_percent', models.PositiveSmallIntegerField(default=100, validators=[django.core.validators.MaxValueValidator(100)])),
                ('payment_status', models.CharField(choices=[('pending', 'Pending'), ('held', 'Held'), ('distributed', 'Distributed')], default='pending', max_length=20)),
                ('version', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('organizer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='organized_sessions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['starts_at'],
                'indexes': [models.Index(fields=['starts_at'], name='session_starts_at_idx')],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(current_attendees__lte=models.F('max_attendees')), name='session_attendees_within_capacity'),
                    models.CheckConstraint(condition=models.Q(venue_cut_percent__lte=100) & models.Q(coach_cut_percent__lte=100), name='session_cut_percent_range'),
                ],
            },
        ),
        migrations.CreateModel(
            name='SessionAttendee',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('joined_at', models.DateTimeField(auto_now_add=True)),
                ('session', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='attendee_links', to='play_sessions.session')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='session_seats', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['joined_at'],
                'constraints': [models.UniqueConstraint(fields=('session', 'user'), name='unique_session_attendee')],
            },
        ),
    ]
