"""Bookings app package.

A booking is one user's purchase of a seat in a session. It is opened
at checkout, settled by payment provider events and closed by a
cancellation or refund. Bookings never grant a seat on their own: the
session capacity aggregate decides, inside the same transaction.
"""
