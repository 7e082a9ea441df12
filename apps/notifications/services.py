"""Notification services for in-app notifications and email."""

from __future__ import annotations

import logging

from django.conf import settings  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore
from django.core.mail import send_mail  # type: ignore

logger = logging.getLogger(__name__)


# ============================================================================
# EMAIL NOTIFICATIONS
# ============================================================================

def send_email_notification(recipient_email: str, subject: str, message: str) -> bool:
    """
    Send a plain-text email.

    Returns:
        bool: True if the mail backend accepted the message
    """
    try:
        send_mail(
            subject=subject,
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            fail_silently=False,
        )
        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False


# ============================================================================
# IN-APP NOTIFICATIONS
# ============================================================================

def create_in_app_notification(
    user_id: int,
    type: str,
    title: str,
    message: str,
    *,
    related_id: str = "",
    link: str = "",
) -> bool:
    """
    Store an in-app notification for ``user_id``.

    Returns:
        bool: True if the notification was created
    """
    try:
        from .models import Notification

        Notification.objects.create(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            related_id=related_id,
            link=link,
        )

        logger.info(f"In-app notification created for user {user_id}: {title}")
        return True

    except Exception as e:
        logger.error(f"Failed to create in-app notification for user {user_id}: {e}", exc_info=True)
        return False


def notify_user(
    user_id: int,
    type: str,
    title: str,
    message: str,
    *,
    related_id: str = "",
    link: str = "",
) -> dict[str, bool]:
    """
    Deliver a notification on every channel the user has.

    Returns:
        dict: delivery result per channel
    """
    results = {
        "in_app": create_in_app_notification(
            user_id, type, title, message, related_id=related_id, link=link
        ),
        "email": False,
    }

    if settings.NOTIFICATIONS_EMAIL_ENABLED:
        email = (
            get_user_model().objects.filter(pk=user_id).values_list("email", flat=True).first()
        )
        if email:
            results["email"] = send_email_notification(email, title, message)

    return results
