"""Notifications app package.

Turns booking and waitlist events into in-app notifications, with an
optional email copy to the recipient.
"""
