"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    """Read-only: status changes go through payment events and cancellations."""

    list_display = (
        "booking_code",
        "session",
        "user",
        "status",
        "payment_status",
        "price_cents",
        "created_at",
    )
    list_filter = ("status", "payment_status")
    search_fields = ("booking_code", "payment_intent_id", "session__title", "user__email")
    readonly_fields = [field.name for field in Booking._meta.fields]

    def has_add_permission(self, request):  # type: ignore
        return False

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False
