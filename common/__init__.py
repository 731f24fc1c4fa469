"""Core business logic package for the expense ledger."""

from .models import BudgetStatus, Expense, MonthKey, Trend, TrendEntry
from .services import MONTHLY_BUDGET, ExpenseService, ReportService
from .storage import DEFAULT_DATA_FILE, CSVStorage
from .exceptions import PersistenceError, ValidationError, RecordNotFoundError

__all__ = [
    "BudgetStatus",
    "Expense",
    "MonthKey",
    "Trend",
    "TrendEntry",
    "ExpenseService",
    "ReportService",
    "CSVStorage",
    "DEFAULT_DATA_FILE",
    "MONTHLY_BUDGET",
    "PersistenceError",
    "ValidationError",
    "RecordNotFoundError",
]
