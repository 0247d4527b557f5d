import os

SECRET_KEY = "test-secret"

STORE_BACKEND = "memory"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "tutoring_center_test"),
}

DEBUG = False
TESTING = True

AUTO_INIT_DB = False

LOG_LEVEL = "WARNING"
LOG_TO_FILE = False
LOG_FILE_PATH = "logs/test.log"

FEE_RULE = "fixed"
LESSONS_PER_MONTH = 12
DEDUCTION_CHECK_MINUTES = 10
# Tests drive deductions with a fixed clock
AUTO_DEDUCTION = False

SHEETS_SYNC_TIMEOUT = 1.0
SHEETS_SYNC_MAX_ATTEMPTS = 3
SHEETS_SYNC_BACKOFF_SECONDS = 1
SHEETS_SYNC_INTERVAL = 1.0
# Tests flush the queue explicitly
SHEETS_SYNC_WORKER = False
