"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_PAGE_LIMIT = 100
MAX_PAGE_LIMIT = 1000

# Upper bound of bookings taken into one statistics run.
DEFAULT_STATISTICS_LIMIT = 1000
STATISTICS_ERROR_MESSAGE = "Cannot calculate statistics"

MIN_PASSWORD_LENGTH = 6
GENERATED_PASSWORD_BYTES = 9
