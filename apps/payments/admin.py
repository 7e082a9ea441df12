"""Admin registration for payments."""

from __future__ import annotations

from django.contrib import admin

from .models import ProcessedPaymentEvent


@admin.register(ProcessedPaymentEvent)
class ProcessedPaymentEventAdmin(admin.ModelAdmin):
    list_display = ("event_id", "event_type", "booking_id", "outcome", "processed_at")
    list_filter = ("event_type", "outcome")
    search_fields = ("event_id", "payment_intent_id")
    readonly_fields = ("event_id", "event_type", "booking_id", "payment_intent_id", "outcome", "processed_at")
