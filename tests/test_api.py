from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from api.app import create_app
from common.models import Expense


@pytest.fixture
def client(data_file, clock):
    app = create_app(data_file=data_file, clock=clock)
    app.config.update(TESTING=True)
    return app.test_client()


def _add(client, category: str, amount: str, **extra):
    return client.post("/expenses", json={"category": category, "amount": amount, **extra})


def test_create_and_fetch_expense(client) -> None:
    response = _add(client, "Food", "12.5", note="tea")

    assert response.status_code == 201
    created = Expense.from_dict(response.get_json())
    assert created == Expense(1, "Food", Decimal("12.50"), date(2024, 2, 15), "tea")

    fetched = client.get("/expenses/1")
    assert fetched.status_code == 200
    assert fetched.get_json() == response.get_json()


def test_list_expenses_with_total(client) -> None:
    _add(client, "Food", "10")
    _add(client, "Rent", "15.25")

    payload = client.get("/expenses").get_json()

    assert [item["id"] for item in payload["items"]] == [1, 2]
    assert payload["total"] == "25.25"


def test_validation_errors_return_400(client) -> None:
    response = _add(client, "Food", "-4")

    assert response.status_code == 400
    assert response.get_json()["error"] == "Validation error"

    not_json = client.post("/expenses", data="amount=1")
    assert not_json.status_code == 400


def test_update_and_missing_update(client, clock) -> None:
    _add(client, "Food", "10", date="2024-01-01")
    clock.today = date(2024, 2, 20)

    response = client.put("/expenses/1", json={"category": "Transport", "amount": "11"})
    assert response.status_code == 200
    assert response.get_json()["date"] == "2024-02-20"
    assert response.get_json()["category"] == "Transport"

    missing = client.put("/expenses/5", json={"category": "Food", "amount": "1"})
    assert missing.status_code == 404
    assert client.get("/expenses/5").status_code == 404


def test_delete_is_idempotent(client) -> None:
    _add(client, "Food", "10")

    assert client.delete("/expenses/1").status_code == 204
    assert client.delete("/expenses/1").status_code == 204
    assert client.get("/expenses").get_json()["items"] == []


def test_reports(client) -> None:
    _add(client, "Food", "100", date="2024-01-05")
    _add(client, "Rent", "5000")
    _add(client, "Food", "150")

    categories = client.get("/reports/categories").get_json()["items"]
    assert {item["category"]: item["total"] for item in categories} == {
        "Food": "250.00",
        "Rent": "5000.00",
    }

    months = client.get("/reports/months").get_json()["items"]
    assert [(item["month"], item["direction"]) for item in months] == [
        ("January-2024", "increased"),
        ("February-2024", "increased"),
    ]

    budget = client.get("/reports/budget").get_json()
    assert budget == {
        "month": "February-2024",
        "total": "5150.00",
        "limit": "5000.00",
        "exceeded": True,
        "status": "exceeded",
    }


def test_export(client, data_file) -> None:
    _add(client, "Savings", "200", note="rainy day")

    response = client.post("/export")

    assert response.status_code == 200
    assert response.get_json() == {"path": str(data_file), "count": 1}
    assert data_file.read_text(encoding="utf-8") == "1,Savings,200.00,2024-02-15,rainy day\n"


def test_persistence_errors_return_500(tmp_path, clock) -> None:
    app = create_app(data_file=tmp_path / "missing" / "expenses.csv", clock=clock)
    client = app.test_client()

    response = _add(client, "Food", "1")

    assert response.status_code == 500
    assert response.get_json()["error"] == "Persistence error"


def test_month_report_filtered_by_label(client) -> None:
    _add(client, "Food", "100", date="2024-01-05")
    _add(client, "Food", "40")

    items = client.get("/reports/months?month=February-2024").get_json()["items"]

    assert items == [{
        "month": "February-2024",
        "total": "40.00",
        "previous_month": "January-2024",
        "previous_total": "100.00",
        "direction": "decreased",
    }]

    bad = client.get("/reports/months?month=Smarch-2024")
    assert bad.status_code == 400
    assert bad.get_json()["field"] == "month"


def test_error_bodies_identify_the_problem(client) -> None:
    invalid = _add(client, "Casino", "1").get_json()
    assert invalid["field"] == "category"
    assert invalid["details"].startswith("category must be one of")

    missing = client.get("/expenses/12").get_json()
    assert missing == {"error": "Record not found", "id": 12, "details": "Expense 12 not found"}
