"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 1
DEFAULT_REPORT_DAYS = 7
MIN_PASSWORD_LENGTH = 4
GENERATED_PASSWORD_LENGTH = 8
MAX_JUSTIFICATION_LENGTH = 2000
NOT_AUTHORIZED = "not authorized"
