from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from common.services import ExpenseService, ReportService
from common.storage import CSVStorage


class FixedClock:
    """Callable clock that tests can move between calls."""

    def __init__(self, today: date) -> None:
        self.today = today

    def __call__(self) -> date:
        return self.today


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(date(2024, 2, 15))


@pytest.fixture
def data_file(tmp_path: Path) -> Path:
    return tmp_path / "expenses.csv"


@pytest.fixture
def service(data_file: Path, clock: FixedClock) -> ExpenseService:
    return ExpenseService(CSVStorage(data_file), clock=clock)


@pytest.fixture
def reports(service: ExpenseService) -> ReportService:
    return ReportService(service)
