"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Collections
STUDENTS = "students"
TEACHERS = "teachers"
COURSES = "courses"
SUBJECTS = "subjects"
LEADS = "leads"
FINANCE = "finance"
SCHEDULE = "schedule"
ATTENDANCE = "attendance"
DAILY_DEDUCTIONS = "dailyDeductions"
ACTIVITIES = "activities"
SETTINGS = "settings"

SETTINGS_DOC_ID = "app"

# Student.course label when no course is assigned
NOT_ASSIGNED = "Not Assigned"
UNASSIGNED_LABEL = "Guruhsiz"

# Daily fee = monthly price / lessons per month
DEFAULT_LESSONS_PER_MONTH = 12
WEEKS_PER_MONTH = 4.33

AUTO_DEDUCTION_CATEGORY = "Avtomatik yechim"
AUTO_DEDUCTION_TITLE = "{title} - Avtomatik dars to'lovi"
TUITION_CATEGORY = "Tuition"
CURRENCY = "UZS"

DEFAULT_HOMEWORK = "1"
SYNC_DEFAULT_HOMEWORK = "0"
UNKNOWN_STUDENT = "Unknown"

DEFAULT_PAYMENTS_LIMIT = 5
DEFAULT_DEDUCTION_CHECK_MINUTES = 10

# Outbound spreadsheet sync
DEFAULT_SYNC_TIMEOUT_SECONDS = 10.0
DEFAULT_SYNC_MAX_ATTEMPTS = 5
DEFAULT_SYNC_BACKOFF_SECONDS = 30
DEFAULT_SYNC_WORKER_INTERVAL_SECONDS = 15
