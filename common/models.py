"""Data models for the expense ledger domain."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Sequence

__all__ = [
    "BudgetStatus",
    "Expense",
    "MonthKey",
    "Trend",
    "TrendEntry",
    "format_amount",
]

FIELD_COUNT = 5
TWO_PLACES = Decimal("0.01")


def format_amount(amount: Decimal) -> str:
    """Render an amount with exactly two fraction digits."""
    return f"{amount:.2f}"


class MonthKey(NamedTuple):
    """Calendar month and year used to group expenses."""

    year: int
    month: int

    @classmethod
    def of(cls, day: date) -> "MonthKey":
        return cls(day.year, day.month)

    @classmethod
    def parse(cls, label: str) -> "MonthKey":
        """Reverse ``label``: ``"February-2024"`` becomes ``MonthKey(2024, 2)``."""
        name, _, year = label.strip().partition("-")
        months = {month.lower(): number for number, month in enumerate(calendar.month_name) if month}
        if name.lower() not in months or not year.isdigit():
            raise ValueError(f"Invalid month label '{label}'")
        return cls(int(year), months[name.lower()])

    @property
    def label(self) -> str:
        return f"{calendar.month_name[self.month]}-{self.year}"

    def previous(self) -> "MonthKey":
        """Return the prior calendar month, crossing into December of last year."""
        if self.month == 1:
            return MonthKey(self.year - 1, 12)
        return MonthKey(self.year, self.month - 1)


@dataclass(frozen=True)
class Expense:
    id: int
    category: str
    amount: Decimal
    date: date
    note: str = ""

    @property
    def month_key(self) -> MonthKey:
        return MonthKey.of(self.date)

    def to_row(self) -> List[str]:
        """Serialise the expense to the five persisted text fields."""
        return [
            str(self.id),
            self.category,
            format_amount(self.amount),
            self.date.isoformat(),
            self.note,
        ]

    @classmethod
    def from_row(cls, row: Sequence[str]) -> "Expense":
        """Hydrate an Expense from persisted fields.

        Rows with extra fields come from files written before notes were
        quoted; the trailing fields are rejoined into the note.
        """
        if len(row) < FIELD_COUNT:
            raise ValueError(f"Expected {FIELD_COUNT} fields, got {len(row)}")
        try:
            amount = Decimal(row[2].strip()).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
        except InvalidOperation as exc:
            raise ValueError(f"Invalid amount '{row[2]}'") from exc
        if not amount.is_finite():
            raise ValueError(f"Invalid amount '{row[2]}'")
        return cls(
            id=int(row[0]),
            category=row[1],
            amount=amount,
            date=date.fromisoformat(row[3].strip()),
            note=",".join(row[FIELD_COUNT - 1:]),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the expense to JSON-friendly natives."""
        return {
            "id": self.id,
            "category": self.category,
            "amount": format_amount(self.amount),
            "date": self.date.isoformat(),
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Expense":
        return cls(
            id=int(data["id"]),
            category=data["category"],
            amount=Decimal(str(data["amount"])),
            date=date.fromisoformat(data["date"]),
            note=data.get("note") or "",
        )

    def __str__(self) -> str:
        return ",".join(self.to_row())


class Trend(str, Enum):
    INCREASED = "increased"
    DECREASED = "decreased"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class TrendEntry:
    month: MonthKey
    total: Decimal
    previous_total: Decimal

    @property
    def direction(self) -> Trend:
        if self.total > self.previous_total:
            return Trend.INCREASED
        if self.total < self.previous_total:
            return Trend.DECREASED
        return Trend.UNCHANGED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month.label,
            "total": format_amount(self.total),
            "previous_month": self.month.previous().label,
            "previous_total": format_amount(self.previous_total),
            "direction": self.direction.value,
        }


@dataclass(frozen=True)
class BudgetStatus:
    month: MonthKey
    total: Decimal
    limit: Decimal

    @property
    def exceeded(self) -> bool:
        return self.total > self.limit

    @property
    def status(self) -> str:
        return "exceeded" if self.exceeded else "within budget"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month.label,
            "total": format_amount(self.total),
            "limit": format_amount(self.limit),
            "exceeded": self.exceeded,
            "status": self.status,
        }
