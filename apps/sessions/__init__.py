"""Sessions bounded context: capacity, attendee roster and policies of a bookable session."""
