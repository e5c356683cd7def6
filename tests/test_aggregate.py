from datetime import datetime
from decimal import Decimal

import pytest

from expenses.aggregate import aggregate_totals, top_categories
from expenses.domain import Expense, ExpenseDraft, FilterMode, Totals
from expenses.errors import ValidationError
from expenses.filters import filter_expenses
from expenses.transforms import delete_expense, edit_expense

NOW = datetime(2025, 11, 26, 15, 30)


def make_sample():
    return (
        Expense(1, Decimal("10.00"), "Food", "2025-11-26T09:00:00"),
        Expense(2, Decimal("5.50"), "Food", "2025-11-18T09:00:00"),
        Expense(3, Decimal("20.00"), "Rent", "2025-11-26T10:00:00"),
    )


def test_empty():
    assert aggregate_totals(()) == Totals(Decimal(0), {})


def test_week_example():
    week = filter_expenses(make_sample(), FilterMode.WEEK, now=NOW)
    totals = aggregate_totals(week)
    assert totals.total == Decimal("30.00")
    assert totals.by_category == {"Food": Decimal("10.00"), "Rent": Decimal("20.00")}


def test_categories_in_first_appearance_order():
    records = (
        Expense(1, Decimal("1"), "Rent", "2025-11-26T09:00:00"),
        Expense(2, Decimal("1"), "Food", "2025-11-26T09:00:00"),
        Expense(3, Decimal("1"), "Rent", "2025-11-26T09:00:00"),
    )
    assert list(aggregate_totals(records).by_category) == ["Rent", "Food"]


def test_no_drift_over_many_cents():
    records = tuple(Expense(i, Decimal("0.01"), "Food", "2025-11-26T09:00:00") for i in range(10_000))
    assert aggregate_totals(records).total == Decimal("100.00")


def test_no_drift_with_float_amounts_added_and_subtracted():
    records = tuple(
        Expense(i, 0.01 if i % 2 == 0 else -0.01, "Food", "2025-11-26T09:00:00")
        for i in range(10_000)
    )
    totals = aggregate_totals(records)
    assert totals.total == 0
    assert totals.by_category["Food"] == 0


def test_negative_amounts_are_summed():
    records = (
        Expense(1, Decimal("10.00"), "Food", "2025-11-26T09:00:00"),
        Expense(2, Decimal("-3.25"), "Food", "2025-11-26T09:00:00"),
    )
    assert aggregate_totals(records).total == Decimal("6.75")


@pytest.mark.parametrize("amount", ["abc", None, True, Decimal("NaN"), float("inf")])
def test_malformed_amount_raises(amount):
    records = (Expense(1, amount, "Food", "2025-11-26T09:00:00"),)
    with pytest.raises(ValidationError) as exc:
        aggregate_totals(records)
    assert exc.value.field == "amount"


@pytest.mark.parametrize("category", ["", "   ", None])
def test_missing_category_raises(category):
    records = (Expense(1, Decimal("1"), category, "2025-11-26T09:00:00"),)
    with pytest.raises(ValidationError) as exc:
        aggregate_totals(records)
    assert exc.value.field == "category"


def test_edit_is_counted_once():
    records = make_sample()
    edited = edit_expense(records, 1, ExpenseDraft(Decimal("12.00"), "Food", "lunch"))
    totals = aggregate_totals(edited)
    assert totals.total == Decimal("37.50")
    assert totals.by_category["Food"] == Decimal("17.50")


def test_delete_lowers_total_by_that_amount():
    records = make_sample()
    before = aggregate_totals(records).total
    after = aggregate_totals(delete_expense(records, 2)).total
    assert before - after == Decimal("5.50")


def test_top_categories():
    totals = Totals(Decimal("35"), {"Food": Decimal("10"), "Rent": Decimal("20"), "Bus": Decimal("5")})
    assert list(top_categories(totals, 2)) == [("Rent", Decimal("20")), ("Food", Decimal("10"))]
    assert len(list(top_categories(totals, 10))) == 3
    assert list(top_categories(totals, 0)) == []
