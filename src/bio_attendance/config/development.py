import os

from . import db_config_from_env

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
DB_CONFIG = db_config_from_env("bio_attendance")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Apply database/schema.sql on startup (idempotent: CREATE TABLE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Device exports for a week at a busy site stay well under this.
UPLOAD_MAX_BYTES = int(os.getenv("UPLOAD_MAX_BYTES", str(10 * 1024 * 1024)))
# Used for schedules whose grace_period_minutes column is NULL.
DEFAULT_GRACE_PERIOD_MINUTES = int(os.getenv("DEFAULT_GRACE_PERIOD_MINUTES", "15"))
