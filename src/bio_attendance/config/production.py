import os

from . import db_config_from_env

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
DB_CONFIG = db_config_from_env("bio_attendance")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Schema changes are applied with scripts/init_db.py, not on startup.
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

UPLOAD_MAX_BYTES = int(os.getenv("UPLOAD_MAX_BYTES", str(10 * 1024 * 1024)))
DEFAULT_GRACE_PERIOD_MINUTES = int(os.getenv("DEFAULT_GRACE_PERIOD_MINUTES", "15"))
