"""Validation helpers shared across expense ledger services."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from .exceptions import ValidationError

EXPENSE_CATEGORIES = (
    "Groceries",
    "Transport",
    "Entertainment",
    "Food",
    "Utilities",
    "Shopping",
    "Healthcare",
    "Rent",
    "Savings",
    "Subscriptions",
    "Miscellaneous",
    "Other",
)

NOTE_MAX_LENGTH = 200


def _quantize_two_decimals(amount: Decimal) -> Decimal:
    """Round the amount to two decimal places using HALF_UP rounding."""
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def parse_amount(raw: object, field: str = "amount") -> Decimal:
    """Convert raw input to a non-negative Decimal with exactly two fraction digits."""
    if isinstance(raw, bool):
        raise ValidationError(field, "must be a numeric value")
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, TypeError) as exc:  # type: ignore[arg-type]
        raise ValidationError(field, "must be a numeric value") from exc

    if not amount.is_finite():
        raise ValidationError(field, "must be a finite number")
    if amount < 0:
        raise ValidationError(field, "cannot be negative")

    try:
        return _quantize_two_decimals(amount)
    except InvalidOperation as exc:
        raise ValidationError(field, "is out of range") from exc


def parse_identifier(raw: object, field: str = "id") -> int:
    if isinstance(raw, bool):
        raise ValidationError(field, "must be an integer")
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError) as exc:
        raise ValidationError(field, "must be an integer") from exc
    if value <= 0:
        raise ValidationError(field, "must be a positive integer")
    return value


def validate_category(value: object, field: str = "category") -> str:
    """Return the canonical spelling of an allowed category."""
    if not isinstance(value, str):
        raise ValidationError(field, "must be a string")
    canonical = value.strip().lower()
    for category in EXPENSE_CATEGORIES:
        if category.lower() == canonical:
            return category
    raise ValidationError(field, f"must be one of: {', '.join(EXPENSE_CATEGORIES)}")


def validate_note(value: object, field: str = "note", max_length: int = NOTE_MAX_LENGTH) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(field, "must be a string")
    trimmed = value.strip()
    if len(trimmed) > max_length:
        raise ValidationError(field, f"must be at most {max_length} characters")
    return trimmed


def validate_date(value: object, field: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as exc:
            raise ValidationError(field, "must be an ISO date (YYYY-MM-DD)") from exc
    raise ValidationError(field, "must be a date or ISO 8601 string")


def validate_optional_date(value: object, field: str = "date") -> Optional[date]:
    if value is None or value == "":
        return None
    return validate_date(value, field)
