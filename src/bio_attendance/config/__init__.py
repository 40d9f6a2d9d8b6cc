import os


def get_settings_module() -> str:
    # APP_ENV picks the settings module; anything unrecognised means development.
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "bio_attendance.config.production"

    if env in {"test", "testing"}:
        return "bio_attendance.config.testing"

    return "bio_attendance.config.development"


def db_config_from_env(default_database: str) -> dict:
    """DB_* environment variables as the mapping DBConfig.from_settings expects."""
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", ""),
        "database": os.getenv("DB_NAME", default_database),
        # FOR UPDATE gap locks keep concurrent absence inserts from duplicating a shift.
        "isolation_level": os.getenv("DB_ISOLATION_LEVEL", "REPEATABLE READ"),
        "connect_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "10")),
    }
