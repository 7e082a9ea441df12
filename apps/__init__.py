"""Django apps of the Courtside booking service."""
