"""Admin registration for sessions."""

from __future__ import annotations

from django.contrib import admin

from .models import Session, SessionAttendee


class SessionAttendeeInline(admin.TabularInline):
    model = SessionAttendee
    extra = 0
    can_delete = False
    readonly_fields = ("user", "joined_at")

    def has_add_permission(self, request, obj=None):  # type: ignore
        return False


@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):
    """Seat counters are read-only here; they change only through bookings and the waitlist."""

    list_display = (
        "title",
        "starts_at",
        "current_attendees",
        "max_attendees",
        "waitlist_count",
        "price_cents",
    )
    list_filter = ("waitlist_enabled", "auto_promote_waitlist", "payment_status")
    search_fields = ("title", "location")
    readonly_fields = ("current_attendees", "waitlist_count", "version", "created_at", "updated_at")
    inlines = [SessionAttendeeInline]

    def save_model(self, request, obj, form, change):  # type: ignore
        # Never write back counters read before a concurrent capacity commit.
        if change:
            if form.changed_data:
                obj.save(update_fields=form.changed_data + ["updated_at"])
            return
        super().save_model(request, obj, form, change)
