"""Framework-agnostic business services for the expense ledger."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .exceptions import PersistenceError, RecordNotFoundError
from .models import BudgetStatus, Expense, MonthKey, TrendEntry
from .storage import CSVStorage
from .validators import (
    parse_amount,
    parse_identifier,
    validate_category,
    validate_note,
    validate_optional_date,
)

MONTHLY_BUDGET = Decimal("5000.00")

Clock = Callable[[], date]

logger = logging.getLogger(__name__)


class ExpenseService:
    """Owns the ordered expense ledger and mediates persistence."""

    def __init__(self, storage: CSVStorage, clock: Clock = date.today) -> None:
        self._storage = storage
        self._clock = clock
        self._expenses: List[Expense] = []
        self._next_id = 1
        self.load()  # Hydrate the ledger from the data file on construction.

    # Public API -----------------------------------------------------------
    def add(
        self,
        category: object,
        amount: object,
        note: object = None,
        *,
        spent_on: object = None,
    ) -> Expense:
        expense = Expense(
            id=self._next_id,
            category=validate_category(category),
            amount=parse_amount(amount),
            date=validate_optional_date(spent_on, "spent_on") or self._clock(),
            note=validate_note(note),
        )
        self._next_id += 1
        self._expenses.append(expense)
        logger.info("Added expense %s", expense.id)
        self.save()
        return expense

    def update(
        self, expense_id: object, category: object, amount: object, note: object = None
    ) -> Optional[Expense]:
        """Overwrite an expense in place, or return None when the id is unknown."""
        target = parse_identifier(expense_id)
        changes = {
            "category": validate_category(category),
            "amount": parse_amount(amount),
            "note": validate_note(note),
        }
        for index, existing in enumerate(self._expenses):
            if existing.id == target:
                updated = replace(existing, date=self._clock(), **changes)
                self._expenses[index] = updated
                logger.info("Updated expense %s", target)
                self.save()
                return updated
        logger.info("Expense %s not found for update", target)
        return None

    def delete(self, expense_id: object) -> int:
        """Remove every record with the id and persist, returning the count removed."""
        target = parse_identifier(expense_id)
        before = len(self._expenses)
        self._expenses = [expense for expense in self._expenses if expense.id != target]
        removed = before - len(self._expenses)
        logger.info("Deleted %d expense(s) with id %s", removed, target)
        self.save()
        return removed

    def get(self, expense_id: object) -> Expense:
        """Return an expense or raise if it does not exist."""
        target = parse_identifier(expense_id)
        for expense in self._expenses:
            if expense.id == target:
                return expense
        raise RecordNotFoundError(target)

    def list(self) -> List[Expense]:
        return list(self._expenses)

    def export(self) -> Path:
        self.save()
        logger.info("Exported %d expenses to %s", len(self._expenses), self._storage.path)
        return self._storage.path

    def load(self) -> None:
        """Load existing expenses.

        An unreadable file is moved aside and the ledger starts empty.
        """
        self._expenses = []
        self._next_id = 1
        if not self._storage.exists():
            logger.info("No existing data found at %s. Starting fresh.", self._storage.path)
            return
        try:
            expenses = [Expense.from_row(row) for row in self._storage.load()]
        except (PersistenceError, ValueError) as exc:
            logger.warning("Could not load %s (%s). Starting fresh.", self._storage.path, exc)
            try:
                self._storage.quarantine()
            except PersistenceError as move_exc:
                logger.error("%s; the next save will overwrite it", move_exc)
            return
        self._expenses = expenses
        self._next_id = max((expense.id for expense in expenses), default=0) + 1
        logger.debug("Loaded %d expenses, next id %d", len(expenses), self._next_id)

    def save(self) -> None:
        # Full snapshot rewrite; a failure leaves the in-memory ledger as mutated.
        try:
            self._storage.save(expense.to_row() for expense in self._expenses)
        except PersistenceError:
            logger.error("Failed to save expenses to %s", self._storage.path)
            raise

    @property
    def clock(self) -> Clock:
        return self._clock


class ReportService:
    """Derives aggregate views from the expense ledger."""

    def __init__(
        self,
        expense_service: ExpenseService,
        monthly_budget: object = MONTHLY_BUDGET,
        clock: Optional[Clock] = None,
    ) -> None:
        self._expenses = expense_service
        self._monthly_budget = parse_amount(monthly_budget, "monthly_budget")
        self._clock = clock or expense_service.clock

    def category_totals(self) -> Dict[str, Decimal]:
        totals: Dict[str, Decimal] = {}
        for expense in self._expenses.list():
            totals[expense.category] = totals.get(expense.category, Decimal("0.00")) + expense.amount
        return totals

    def monthly_totals(self) -> Dict[MonthKey, Decimal]:
        totals: Dict[MonthKey, Decimal] = {}
        for expense in self._expenses.list():
            key = expense.month_key
            totals[key] = totals.get(key, Decimal("0.00")) + expense.amount
        return dict(sorted(totals.items()))

    def month_over_month(
        self, monthly_totals: Optional[Dict[MonthKey, Decimal]] = None
    ) -> List[TrendEntry]:
        """Compare each month against the calendar month before it.

        A prior month with no spending counts as zero.
        """
        if monthly_totals is None:
            monthly_totals = self.monthly_totals()
        return [
            TrendEntry(
                month=key,
                total=total,
                previous_total=monthly_totals.get(key.previous(), Decimal("0.00")),
            )
            for key, total in monthly_totals.items()
        ]

    def budget_check(self) -> BudgetStatus:
        current = MonthKey.of(self._clock())
        total = sum(
            (expense.amount for expense in self._expenses.list() if expense.month_key == current),
            start=Decimal("0.00"),
        )
        return BudgetStatus(month=current, total=total, limit=self._monthly_budget)
