"""Admin registration for the waitlist."""

from __future__ import annotations

from django.contrib import admin

from .models import WaitlistEntry


@admin.register(WaitlistEntry)
class WaitlistEntryAdmin(admin.ModelAdmin):
    list_display = ("session", "user", "status", "joined_at", "notification_sent_at")
    list_filter = ("status",)
    search_fields = ("session__title", "user__email")
    readonly_fields = ("joined_at", "notification_sent_at")
