"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_PAGE_SIZE = 10
DEFAULT_DIRECTORY_LIMIT = 50
DEFAULT_HISTORY_LIMIT = 30
MIN_PASSWORD_LENGTH = 6

WORKLOG_TITLE_MIN = 3
WORKLOG_TITLE_MAX = 200
WORKLOG_SUMMARY_MIN = 5
WORKLOG_SUMMARY_MAX = 1000
WORKLOG_MINUTES_MIN = 1
WORKLOG_MINUTES_MAX = 1440
