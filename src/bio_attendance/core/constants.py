"""Constants and defaults.

Note: Keep thresholds here to avoid magic numbers spread across code.
"""

DEFAULT_GRACE_PERIOD_MINUTES = 15

# Lateness below this never counts, whatever the grace period.
TARDY_THRESHOLD_MINUTES = 15

# (first hour inclusive, last hour inclusive, shift type value)
SHIFT_HOUR_BANDS = (
    (0, 4, "graveyard"),
    (5, 11, "morning"),
    (12, 16, "afternoon"),
    (17, 20, "evening"),
    (21, 23, "night"),
)

EARLY_ARRIVAL_TOLERANCE_MINUTES = 60
LATE_START_EARLY_ARRIVAL_FROM_HOUR = 18
LATE_START_HOUR = 21

DOUBLE_PUNCH_MINUTES = 10
MAX_SHIFT_DURATION_MINUTES = 20 * 60

# Anomaly (manual review) thresholds
REVIEW_SPARSE_SCAN_COUNT = 2
REVIEW_SPARSE_SCAN_DISTANCE_MINUTES = 2 * 60
REVIEW_EARLY_IN_MINUTES = 3 * 60
REVIEW_LATE_IN_MINUTES = 4 * 60
REVIEW_LATE_OUT_MINUTES = 4 * 60
REVIEW_EARLY_OUT_MINUTES = 3 * 60

UNDERTIME_HOUR_MINUTES = 60

# Batch-level scan anomaly detection
MAX_TRAVEL_MINUTES = 30
MAX_SCANS_PER_DAY = 6
UNUSUAL_HOUR_START = 2
UNUSUAL_HOUR_END = 5

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
