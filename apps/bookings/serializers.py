"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Booking


class BookingSerializer(serializers.ModelSerializer):
    session_title = serializers.CharField(source="session.title", read_only=True, default=None)

    class Meta:
        model = Booking
        fields = [
            "id",
            "booking_code",
            "session",
            "session_title",
            "status",
            "payment_status",
            "payment_intent_id",
            "price_cents",
            "currency",
            "platform_fee_cents",
            "venue_amount_cents",
            "coach_amount_cents",
            "confirmed_at",
            "cancelled_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CheckoutSerializer(serializers.Serializer):
    session_id = serializers.UUIDField()


class PaymentSplitSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    platform = serializers.IntegerField()
    venue = serializers.IntegerField()
    coach = serializers.IntegerField()


class CheckoutResponseSerializer(serializers.Serializer):
    booking = BookingSerializer()
    client_secret = serializers.CharField()
    split_details = PaymentSplitSerializer()
