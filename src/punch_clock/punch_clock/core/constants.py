"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

SECRET_CODE_LENGTH = 8
DEFAULT_HOURLY_RATE = 15.0
BREAK_WARNING_HOURS = 1.5
DEFAULT_REQUEST_LIMIT = 500
ADMIN_NAME = "Admin"
