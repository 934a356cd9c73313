"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_HISTORY_LIMIT = 30
DEFAULT_LATE_GRACE_MINUTES = 15
DEFAULT_EARLY_EXIT_GRACE_MINUTES = 0

# employment_type -> (weekly target, monthly target), in hours
DEFAULT_HOURS_TARGETS = {
    "full_time": (48.0, 192.0),
    "part_time": (24.0, 96.0),
}

HOURS_PRECISION = 2
DISPLAY_PRECISION = 1
