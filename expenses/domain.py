from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, NamedTuple, Union


@dataclass(frozen=True)
class Expense:
    id: int          # assigned by the store, never changes
    amount: Decimal
    category: str
    ts: str          # creation instant, e.g. "2025-11-23T09:15:00+00:00"
    note: str = ""


# What the form holds before the store assigns an id and timestamp
@dataclass(frozen=True)
class ExpenseDraft:
    amount: Decimal
    category: str
    note: str = ""


class FilterMode(Enum):
    ALL = "All"
    WEEK = "Week"
    MONTH = "Month"

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True)
class Creating:
    pass


@dataclass(frozen=True)
class Editing:
    expense_id: int


FormMode = Union[Creating, Editing]


class Totals(NamedTuple):
    total: Decimal
    by_category: Dict[str, Decimal]
