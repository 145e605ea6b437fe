"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SICK_LEAVE_DAYS = 10
DEFAULT_VACATION_LEAVE_DAYS = 15
DEFAULT_PERSONAL_LEAVE_DAYS = 5

REASON_MIN_LENGTH = 10
REASON_MAX_LENGTH = 500

MAX_LEAVE_TOTAL_DAYS = 365
MIN_BALANCE_YEAR = 2020
MAX_BALANCE_YEAR = 2100
