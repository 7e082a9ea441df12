"""Waitlist app: overflow queue of a full session, promoted first come, first served."""
