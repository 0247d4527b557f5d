import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "tutoring_center"),
}

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_TO_FILE = bool(int(os.getenv("LOG_TO_FILE", "1")))
LOG_FILE_PATH = os.getenv("LOG_FILE_PATH", "logs/tutoring_center.log")

FEE_RULE = os.getenv("FEE_RULE", "fixed")
LESSONS_PER_MONTH = int(os.getenv("LESSONS_PER_MONTH", "12"))
DEDUCTION_CHECK_MINUTES = int(os.getenv("DEDUCTION_CHECK_MINUTES", "10"))
# Charge due lessons from request hooks
AUTO_DEDUCTION = bool(int(os.getenv("AUTO_DEDUCTION", "1")))

SHEETS_SYNC_TIMEOUT = float(os.getenv("SHEETS_SYNC_TIMEOUT", "10"))
SHEETS_SYNC_MAX_ATTEMPTS = int(os.getenv("SHEETS_SYNC_MAX_ATTEMPTS", "5"))
SHEETS_SYNC_BACKOFF_SECONDS = int(os.getenv("SHEETS_SYNC_BACKOFF_SECONDS", "30"))
SHEETS_SYNC_INTERVAL = float(os.getenv("SHEETS_SYNC_INTERVAL", "15"))
SHEETS_SYNC_WORKER = bool(int(os.getenv("SHEETS_SYNC_WORKER", "1")))
