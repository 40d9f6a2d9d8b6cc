from . import db_config_from_env

SECRET_KEY = "test-secret"
DB_CONFIG = db_config_from_env("bio_attendance_test")

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

# Tests inject an in-memory container and never touch MySQL.
AUTO_INIT_DB = False

UPLOAD_MAX_BYTES = 1024 * 1024
DEFAULT_GRACE_PERIOD_MINUTES = 15
