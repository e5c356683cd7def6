from dataclasses import replace
from typing import Optional, Tuple

from expenses.domain import Expense, ExpenseDraft
from expenses.errors import ExpenseNotFoundError


def find_expense(records: Tuple[Expense, ...], expense_id: int) -> Optional[Expense]:
    return next((e for e in records if e.id == expense_id), None)


def add_expense(records: Tuple[Expense, ...], e: Expense) -> Tuple[Expense, ...]:
    # newest first, same as the store's ORDER BY id DESC
    return (e,) + records


def edit_expense(
    records: Tuple[Expense, ...], expense_id: int, draft: ExpenseDraft
) -> Tuple[Expense, ...]:
    if find_expense(records, expense_id) is None:
        raise ExpenseNotFoundError(expense_id)
    return tuple(
        replace(e, amount=draft.amount, category=draft.category, note=draft.note)
        if e.id == expense_id
        else e
        for e in records
    )


def delete_expense(records: Tuple[Expense, ...], expense_id: int) -> Tuple[Expense, ...]:
    for i, e in enumerate(records):
        if e.id == expense_id:
            return records[:i] + records[i + 1:]
    raise ExpenseNotFoundError(expense_id)
