"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

HOUR_DURATION = 60
HALF_HOUR_DURATION = 30

DEFAULT_SCHEDULE_HOURS = 8
LUNCH_SCHEDULE_HOURS = 8
LUNCH_BREAK_MINUTES = 30

OVERTIME_TIER_MINUTES = 60
OVERTIME_GRACE_MINUTES = 60
MAX_OVERTIME_MINUTES = 480

# Upper bound for the continuation-count recommendation before tier rounding.
MAX_COUNTED_OVERTIME_MINUTES = 180
NON_HOURLY_RECOMMENDED_MINUTES = HALF_HOUR_DURATION

STALE_CONTINUATION_MINUTES = 120
MAX_TEMP_STOP_HOURS = 15

STORE_LOCK_TIMEOUT_SECONDS = 5.0
DEFAULT_LEDGER_HISTORY_DAYS = 31
