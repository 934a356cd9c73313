import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timeclock_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Apply database/schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "15"))
EARLY_EXIT_GRACE_MINUTES = int(os.getenv("EARLY_EXIT_GRACE_MINUTES", "0"))

# employment_type -> (weekly hours, monthly hours)
HOURS_TARGETS = {
    "full_time": (48, 192),
    "part_time": (24, 96),
}
