from datetime import datetime
from typing import Any, Dict, Optional, Sequence, Tuple

from expenses.aggregate import aggregate_totals
from expenses.domain import Editing, Expense, FilterMode, FormMode
from expenses.errors import ValidationError
from expenses.events import EXPENSE_ADDED, EXPENSE_DELETED, EXPENSE_EDITED, EventBus
from expenses.filters import filter_expenses
from expenses.functional import Either, Right
from expenses.logging_setup import get_logger
from expenses.store import ExpenseStore
from expenses.validation import validate_draft

logger = get_logger("expenses.services")


class ExpenseService:
    """Facade the screen talks to: form submits, deletes and the filtered summary.

    Every mutation goes to the store first and is then announced on the bus
    with the affected record.
    """

    def __init__(self, store: ExpenseStore, bus: Optional[EventBus] = None):
        self.store = store
        self.bus = bus or EventBus()

    def load(self) -> Tuple[Expense, ...]:
        return self.store.load()

    def submit(self, mode: FormMode, amount: Any, category: Any, note: Any = "") -> Either[ValidationError, Expense]:
        """Validate form input, then insert (``Creating``) or update (``Editing``)."""
        checked = validate_draft(amount, category, note)
        if checked.is_left():
            logger.info(f"Rejected form input: {checked.get_error()}")
            return checked

        draft = checked.get_or_else(None)
        if isinstance(mode, Editing):
            saved = self.store.update(mode.expense_id, draft)
            self.bus.publish(EXPENSE_EDITED, {"expense": saved})
        else:
            saved = self.store.insert(draft)
            self.bus.publish(EXPENSE_ADDED, {"expense": saved})
        return Right(saved)

    def delete(self, expense_id: int) -> None:
        self.store.delete(expense_id)
        self.bus.publish(EXPENSE_DELETED, {"expense_id": expense_id})

    def summary(
        self,
        mode: FilterMode,
        now: Optional[datetime] = None,
        records: Optional[Sequence[Expense]] = None,
    ) -> Dict[str, Any]:
        """Filter a snapshot by ``mode`` and total it.

        Records with unreadable timestamps are left out of the totals and
        listed under ``skipped`` with their error.
        """
        snapshot = tuple(records) if records is not None else self.load()
        report: Dict[str, Any] = {
            "mode": mode,
            "expenses": (),
            "skipped": [],
            "result": {},
        }

        def skip(e: Expense, err: ValidationError) -> None:
            report["skipped"].append({"expense": e, "error": err.as_dict()})

        report["expenses"] = filter_expenses(snapshot, mode, now=now, on_error=skip)
        totals = aggregate_totals(report["expenses"])
        report["result"] = {"total": totals.total, "by_category": totals.by_category}
        return report
