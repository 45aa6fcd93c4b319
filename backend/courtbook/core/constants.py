"""Application-wide constants for the court reservation backend."""

from __future__ import annotations

BRAND_NAME = "Sacré Pádel"

# Name of the range exclusion constraint guarding court time ranges
BOOKING_OVERLAP_CONSTRAINT = "bookings_no_overlap"

# Customer search
MIN_CUSTOMER_QUERY_LENGTH = 2
MIN_PHONE_QUERY_DIGITS = 6
CUSTOMER_SEARCH_LIMIT = 8

# Customer booking history paging
CUSTOMER_HISTORY_MAX_LIMIT = 200
CUSTOMER_HISTORY_MAX_OFFSET = 5000

# Reception roles allowed to operate the booking board
RECEPTION_ROLES = frozenset({"owner", "reception"})

# User-facing conflict messages
SLOT_TAKEN_MESSAGE = (
    "That time was just taken by someone else. Refresh availability and pick another slot."
)
HOLD_EXPIRED_MESSAGE = "Your hold expired. Please select the time slot again."
HOLD_NOT_ACTIVE_MESSAGE = "This reservation is no longer on hold."
