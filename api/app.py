"""Flask REST API exposing the expense ledger services."""

from __future__ import annotations

import os
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from flask import Flask, jsonify, request
from flask_cors import CORS

from common.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from common.models import MonthKey, format_amount
from common.services import MONTHLY_BUDGET, Clock, ExpenseService, ReportService
from common.storage import DEFAULT_DATA_FILE, CSVStorage


def _allowed_origins() -> Union[str, List[str]]:
    """Every origin in development, otherwise the configured list (or all when unset)."""
    if os.getenv("EXPENSE_TRACKER_ENV", "prod").lower() in {"dev", "development"}:
        return "*"
    configured = os.getenv("EXPENSE_TRACKER_ALLOWED_ORIGINS", "")
    return [origin.strip() for origin in configured.split(",") if origin.strip()] or "*"


def _error_body(exc: Exception) -> Dict[str, Any]:
    body: Dict[str, Any] = {"details": str(exc)}
    if isinstance(exc, ValidationError):
        body.update(error="Validation error", field=exc.field)
    elif isinstance(exc, RecordNotFoundError):
        body.update(error="Record not found", id=exc.expense_id)
    else:
        body.update(error="Persistence error")
    return body


ERROR_STATUS = {ValidationError: 400, RecordNotFoundError: 404, PersistenceError: 500}


def create_app(
    data_file: Optional[Path] = None,
    monthly_budget: Decimal = MONTHLY_BUDGET,
    clock: Optional[Clock] = None,
) -> Flask:
    app = Flask(__name__)
    CORS(app, resources={r"/*": {"origins": _allowed_origins()}}, supports_credentials=True)

    path = Path(data_file or os.getenv("EXPENSE_TRACKER_DATA_FILE") or DEFAULT_DATA_FILE)
    expense_service = ExpenseService(CSVStorage(path), clock=clock or date.today)
    reports = ReportService(expense_service, monthly_budget=monthly_budget)

    def _success(payload: Any, status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    def _handle_error(exc: Exception):
        status = next(code for kind, code in ERROR_STATUS.items() if isinstance(exc, kind))
        app.logger.error("%s %s: %s", request.method, request.path, exc)
        return jsonify(_error_body(exc)), status

    for kind in ERROR_STATUS:
        app.register_error_handler(kind, _handle_error)

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("body", "must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("body", "must be a JSON object")
        return data

    @app.get("/expenses")
    def list_expenses():
        expenses = expense_service.list()
        total = sum((expense.amount for expense in expenses), start=Decimal("0.00"))
        return _success({
            "items": [expense.to_dict() for expense in expenses],
            "total": format_amount(total),
        })

    @app.post("/expenses")
    def create_expense():
        payload = _json_body()
        expense = expense_service.add(
            payload.get("category"),
            payload.get("amount"),
            payload.get("note"),
            spent_on=payload.get("date"),
        )
        return _success(expense.to_dict(), 201)

    @app.get("/expenses/<expense_id>")
    def get_expense(expense_id: str):
        expense = expense_service.get(expense_id)
        return _success(expense.to_dict())

    @app.put("/expenses/<expense_id>")
    def update_expense(expense_id: str):
        payload = _json_body()
        expense = expense_service.update(
            expense_id, payload.get("category"), payload.get("amount"), payload.get("note")
        )
        if expense is None:
            raise RecordNotFoundError(expense_id)
        return _success(expense.to_dict())

    @app.delete("/expenses/<expense_id>")
    def delete_expense(expense_id: str):
        expense_service.delete(expense_id)
        return _success({}, 204)

    @app.get("/reports/categories")
    def category_report():
        totals = reports.category_totals()
        return _success({
            "items": [
                {"category": category, "total": format_amount(total)}
                for category, total in totals.items()
            ]
        })

    @app.get("/reports/months")
    def month_report():
        trend = reports.month_over_month()
        label = request.args.get("month")
        if label:
            try:
                wanted = MonthKey.parse(label)
            except ValueError as exc:
                raise ValidationError("month", "must look like January-2024") from exc
            trend = [entry for entry in trend if entry.month == wanted]
        return _success({"items": [entry.to_dict() for entry in trend]})

    @app.get("/reports/budget")
    def budget_report():
        return _success(reports.budget_check().to_dict())

    @app.post("/export")
    def export():
        exported = expense_service.export()
        return _success({"path": str(exported), "count": len(expense_service.list())})

    return app
