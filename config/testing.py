import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_admin_test"),
    "connection_timeout": 5,
}

LEAVE_DEFAULTS = {"sick": 10, "vacation": 15, "personal": 5}

DEBUG = False
TESTING = True

LOG_LEVEL = "WARNING"
LOG_FORMAT = "text"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
