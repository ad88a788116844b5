import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "worktime_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# One JSON file per user lives here
SESSION_DIR = os.getenv("SESSION_DIR", "instance/sessions")
STORE_LOCK_TIMEOUT_SECONDS = float(os.getenv("STORE_LOCK_TIMEOUT_SECONDS", "5"))

DEFAULT_SCHEDULE_HOURS = int(os.getenv("DEFAULT_SCHEDULE_HOURS", "8"))
OVERTIME_POLICY = os.getenv("OVERTIME_POLICY", "threshold")
OVERTIME_GRACE_MINUTES = int(os.getenv("OVERTIME_GRACE_MINUTES", "60"))
STALE_CONTINUATION_MINUTES = int(os.getenv("STALE_CONTINUATION_MINUTES", "120"))
MAX_TEMP_STOP_HOURS = int(os.getenv("MAX_TEMP_STOP_HOURS", "15"))
