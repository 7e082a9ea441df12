"""Serializers for sessions."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.waitlist.models import WaitlistEntry

from .models import Session


class SessionSerializer(serializers.ModelSerializer):
    seats_left = serializers.IntegerField(read_only=True)
    is_full = serializers.BooleanField(read_only=True)

    class Meta:
        model = Session
        fields = [
            "id",
            "title",
            "location",
            "organizer",
            "starts_at",
            "ends_at",
            "max_attendees",
            "current_attendees",
            "seats_left",
            "is_full",
            "waitlist_enabled",
            "waitlist_count",
            "cancellation_deadline_hours",
            "refund_percentage",
            "auto_promote_waitlist",
            "price_cents",
        ]
        read_only_fields = fields


class CancellationResultSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    refund_processed = serializers.BooleanField()
    message = serializers.CharField()


class WaitlistEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = WaitlistEntry
        fields = ["id", "session", "user", "status", "joined_at", "notification_sent_at"]
        read_only_fields = fields
