"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MIN_PASSWORD_LENGTH = 6
TOKEN_BYTES = 40
DEFAULT_TOP_VISITORS = 5
DEFAULT_TREND_DAYS = 7
EXPORT_DATE_FORMAT = "%Y-%m-%d %H:%M"
