"""Application-wide constants for the booking engine."""

BRAND_NAME = "ShaadiSarthi"

# Wire formats accepted from customers when creating a booking
BOOKING_DATE_FORMAT = "%Y-%m-%d"
BOOKING_TIME_FORMAT = "%H:%M"

# Text constraints
MAX_REASON_LENGTH = 500
MAX_NOTES_LENGTH = 2000
MAX_ADDRESS_LENGTH = 500

# Record ids are 32-bit signed integer columns
MAX_RECORD_ID = 2**31 - 1

# Identity headers set by the API gateway after token verification
SUBJECT_ID_HEADER = "X-Subject-Id"
SUBJECT_ROLE_HEADER = "X-Subject-Role"

NO_REASON_PROVIDED = "No reason provided"
