"""Console interface for the expense ledger."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from common.exceptions import PersistenceError, ValidationError
from common.models import Trend, format_amount
from common.services import MONTHLY_BUDGET, ExpenseService, ReportService
from common.storage import DEFAULT_DATA_FILE, CSVStorage

CURRENCY_SYMBOL = "₹"

TREND_MESSAGES = {
    Trend.INCREASED: "⚠️ Spending increased compared to last month.",
    Trend.DECREASED: "✅ Well done! You've reduced your spending this month.",
}


def _parse_date(value: str) -> str:
    try:
        date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"Invalid date '{value}'. Expected format YYYY-MM-DD."
        ) from exc
    return value


def _money(amount: Decimal) -> str:
    return f"{CURRENCY_SYMBOL}{format_amount(amount)}"


def _load_services(data_file: Path, budget: str) -> Tuple[ExpenseService, ReportService]:
    expenses = ExpenseService(CSVStorage(data_file))
    return expenses, ReportService(expenses, monthly_budget=budget)


def format_category_report(totals: Dict[str, Decimal]) -> List[str]:
    lines = ["==== Category-wise Report ===="]
    lines.extend(f"{category}: {_money(total)}" for category, total in totals.items())
    return lines


def format_month_report(reports: ReportService) -> List[str]:
    monthly = reports.monthly_totals()
    trend = {entry.month: entry for entry in reports.month_over_month(monthly)}
    lines = ["==== Month-wise Expense Report ===="]
    for key, total in monthly.items():
        lines.append(f"{key.label}: {_money(total)}")
        message = TREND_MESSAGES.get(trend[key].direction)
        if message:
            lines.append(message)
    return lines


def format_budget(reports: ReportService) -> List[str]:
    status = reports.budget_check()
    lines = [f"This month's total spending: {_money(status.total)}"]
    if status.exceeded:
        lines.append(f"⚠️ Budget exceeded! Limit: {_money(status.limit)}")
    else:
        lines.append("✅ You're within budget.")
    return lines


def handle_expense(args: argparse.Namespace, service: ExpenseService) -> List[str]:
    if args.command == "add":
        expense = service.add(args.category, args.amount, args.note, spent_on=args.date)
        return [f"Expense Added: {expense}"]
    if args.command == "update":
        expense = service.update(args.id, args.category, args.amount, args.note)
        if expense is None:
            return ["Expense not found."]
        return [f"Expense Updated: {expense}"]
    if args.command == "delete":
        service.delete(args.id)
        return ["Expense Deleted."]
    if args.command == "list":
        expenses = service.list()
        if not expenses:
            return ["No expenses found."]
        return [str(expense) for expense in expenses]
    if args.command == "export":
        path = service.export()
        return [f"Data exported to {path}"]
    raise ValueError(f"Unknown command: {args.command}")


def handle_report(args: argparse.Namespace, reports: ReportService) -> List[str]:
    if args.command == "categories":
        return format_category_report(reports.category_totals())
    if args.command == "months":
        return format_month_report(reports)
    if args.command == "budget":
        return format_budget(reports)
    raise ValueError(f"Unknown command: {args.command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Expense Tracker CLI")
    parser.add_argument(
        "--data-file",
        default=DEFAULT_DATA_FILE,
        type=Path,
        help=f"Text file holding the expenses (default: ./{DEFAULT_DATA_FILE})",
    )
    parser.add_argument(
        "--budget",
        default=str(MONTHLY_BUDGET),
        help=f"Monthly budget limit (default: {MONTHLY_BUDGET})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    add = subparsers.add_parser("add", help="Add a new expense")
    add.add_argument("category")
    add.add_argument("amount")
    add.add_argument("--note")
    add.add_argument("--date", type=_parse_date, help="Date spent (default: today)")

    update = subparsers.add_parser("update", help="Update an existing expense")
    update.add_argument("id")
    update.add_argument("category")
    update.add_argument("amount")
    update.add_argument("--note")

    delete = subparsers.add_parser("delete", help="Delete an expense")
    delete.add_argument("id")

    subparsers.add_parser("list", help="List expenses")
    subparsers.add_parser("categories", help="Category-wise report")
    subparsers.add_parser("months", help="Month-wise report with trend")
    subparsers.add_parser("budget", help="Check this month's spending against the budget")
    subparsers.add_parser("export", help="Rewrite the data file from the current ledger")

    return parser


REPORT_COMMANDS = {"categories", "months", "budget"}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        expense_service, report_service = _load_services(args.data_file, args.budget)
        if args.command in REPORT_COMMANDS:
            lines = handle_report(args, report_service)
        else:
            lines = handle_expense(args, expense_service)
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1

    for line in lines:
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
