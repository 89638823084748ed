"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
MIN_PASSWORD_LENGTH = 6
SETTINGS_ID = "global"
STATS_MAX_DAYS = 14
DEFAULT_QR_MAX_FRAMES = 30
ALL_SUBJECTS = "All"
