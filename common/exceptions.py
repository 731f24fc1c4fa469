"""Errors raised by the expense ledger and mapped to messages by the front ends."""

from __future__ import annotations

from pathlib import Path
from typing import Union


class ValidationError(ValueError):
    """Front-end input rejected before any change is applied to the ledger."""

    def __init__(self, field: str, problem: str) -> None:
        super().__init__(f"{field} {problem}")
        self.field = field


class RecordNotFoundError(LookupError):
    def __init__(self, expense_id: Union[int, str]) -> None:
        super().__init__(f"Expense {expense_id} not found")
        self.expense_id = expense_id


class PersistenceError(IOError):
    """The data file could not be read, written or moved aside."""

    def __init__(self, action: str, path: Path) -> None:
        super().__init__(f"Unable to {action} {path}")
        self.action = action
        self.path = path
