import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "hr_admin"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_admin"),
    "connection_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "5")),
}

LEAVE_DEFAULTS = {
    "sick": int(os.getenv("LEAVE_DEFAULT_SICK", "10")),
    "vacation": int(os.getenv("LEAVE_DEFAULT_VACATION", "15")),
    "personal": int(os.getenv("LEAVE_DEFAULT_PERSONAL", "5")),
}

DEBUG = False

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
