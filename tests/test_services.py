from datetime import datetime
from decimal import Decimal

import pytest

from expenses.domain import Creating, Editing, Expense, FilterMode
from expenses.errors import ExpenseNotFoundError, ValidationError
from expenses.events import EXPENSE_ADDED, EXPENSE_DELETED, EXPENSE_EDITED, EventBus
from expenses.services import ExpenseService
from expenses.store import ExpenseStore

NOW = datetime(2025, 11, 26, 15, 30)


@pytest.fixture
def service():
    with ExpenseStore() as store:
        yield ExpenseService(store, EventBus())


def record_events(service):
    seen = []
    for name in (EXPENSE_ADDED, EXPENSE_EDITED, EXPENSE_DELETED):
        service.bus.subscribe(name, lambda event: seen.append(event))
    return seen


def test_submit_creating_inserts(service):
    seen = record_events(service)
    result = service.submit(Creating(), "12.5", "Food", "lunch")
    assert result.is_right()
    saved = result.get_or_else(None)
    assert service.load() == (saved,)
    assert saved.amount == Decimal("12.5")
    assert seen[0].name == EXPENSE_ADDED
    assert seen[0].payload["expense"] == saved


def test_submit_rejects_missing_amount(service):
    seen = record_events(service)
    result = service.submit(Creating(), "", "Food")
    assert result.is_left()
    assert isinstance(result.get_error(), ValidationError)
    assert service.load() == ()
    assert seen == []


def test_submit_editing_updates_in_place(service):
    first = service.submit(Creating(), "10", "Food").get_or_else(None)
    other = service.submit(Creating(), "20", "Rent").get_or_else(None)
    seen = record_events(service)

    edited = service.submit(Editing(first.id), "11", "Food", "fixed").get_or_else(None)

    assert (edited.id, edited.ts) == (first.id, first.ts)
    assert edited.amount == Decimal("11")
    assert service.load() == (other, edited)
    assert seen[0].name == EXPENSE_EDITED


def test_submit_editing_unknown_id(service):
    with pytest.raises(ExpenseNotFoundError):
        service.submit(Editing(42), "1", "Food")


def test_delete_publishes(service):
    e = service.submit(Creating(), "10", "Food").get_or_else(None)
    seen = record_events(service)
    service.delete(e.id)
    assert service.load() == ()
    assert seen[0].payload == {"expense_id": e.id}


def test_summary_of_store(service):
    service.submit(Creating(), "10.00", "Food")
    service.submit(Creating(), "1", "Bus")
    service.submit(Creating(), "2.50", "Food")
    report = service.summary(FilterMode.ALL)
    assert [e.category for e in report["expenses"]] == ["Food", "Bus", "Food"]
    assert report["result"]["total"] == Decimal("13.50")
    assert report["result"]["by_category"] == {"Food": Decimal("12.50"), "Bus": Decimal("1")}


def test_summary_week_of_snapshot(service):
    records = (
        Expense(3, Decimal("20.00"), "Rent", "2025-11-26T10:00:00"),
        Expense(2, Decimal("5.50"), "Food", "2025-11-18T09:00:00"),
        Expense(1, Decimal("10.00"), "Food", "2025-11-26T09:00:00"),
    )
    report = service.summary(FilterMode.WEEK, now=NOW, records=records)
    assert report["mode"] is FilterMode.WEEK
    assert [e.id for e in report["expenses"]] == [3, 1]
    assert report["result"]["total"] == Decimal("30.00")
    assert report["skipped"] == []


def test_summary_skips_unreadable_dates(service):
    bad = Expense(2, Decimal("99"), "Food", "last tuesday")
    records = (Expense(1, Decimal("10.00"), "Food", "2025-11-26T09:00:00"), bad)
    report = service.summary(FilterMode.MONTH, now=NOW, records=records)
    assert report["result"]["total"] == Decimal("10.00")
    assert report["skipped"][0]["expense"] is bad
    assert report["skipped"][0]["error"]["error"] == "invalid_ts"


def test_summary_raises_on_bad_amount(service):
    records = (Expense(1, "ten", "Food", "2025-11-26T09:00:00"),)
    with pytest.raises(ValidationError):
        service.summary(FilterMode.ALL, records=records)
