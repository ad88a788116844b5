import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "worktime_test_db"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

SESSION_DIR = os.getenv("SESSION_DIR", "instance/test-sessions")
STORE_LOCK_TIMEOUT_SECONDS = 1.0

DEFAULT_SCHEDULE_HOURS = 8
OVERTIME_POLICY = os.getenv("OVERTIME_POLICY", "threshold")
OVERTIME_GRACE_MINUTES = 60
STALE_CONTINUATION_MINUTES = 120
MAX_TEMP_STOP_HOURS = 15
