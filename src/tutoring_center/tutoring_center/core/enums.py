from __future__ import annotations

from enum import Enum


class StudentStatus(str, Enum):
    """Enrollment state of a student."""

    ACTIVE = "Active"
    WAITING = "Waiting"
    COMPLETED = "Completed"
    INACTIVE = "Inactive"
    PENDING = "Pending"


class CourseStatus(str, Enum):
    """Course lifecycle; only PAUSED is authoritative when stored."""

    LIVE = "Live"
    UPCOMING = "Upcoming"
    COMPLETED = "Completed"
    PAUSED = "Paused"


class LeadStatus(str, Enum):
    """Sales funnel for prospective students."""

    NEW = "New"
    CONTACTED = "Contacted"
    INTERESTED = "Interested"
    REGISTERED = "Registered"
    LOST = "Lost"


class FinanceType(str, Enum):
    INCOME = "Income"
    EXPENSE = "Expense"


class MarkStatus(str, Enum):
    """Per-student attendance mark."""

    PRESENT = "Present"
    ABSENT = "Absent"


class TransactionKind(str, Enum):
    """Manual balance adjustment made from the student screen."""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class SheetsFormat(str, Enum):
    """Payload layout sent to the spreadsheet endpoint."""

    DEFAULT = "default"
    SIMPLE = "simple"
    COMPACT = "compact"
