from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, Iterator, Tuple

from expenses.domain import Expense, Totals
from expenses.validation import validate_expense


def aggregate_totals(records: Iterable[Expense]) -> Totals:
    """Sum amounts overall and per category.

    Categories keep the order in which they first appear. Amounts are summed
    as ``Decimal`` so cents never drift; negative amounts are summed as they
    are. A record with a malformed amount or category raises
    ``ValidationError`` before it can touch the totals.
    """
    total = Decimal(0)
    by_category: Dict[str, Decimal] = defaultdict(Decimal)

    for e in records:
        e = validate_expense(e)
        total += e.amount
        by_category[e.category] += e.amount

    return Totals(total, dict(by_category))


def top_categories(totals: Totals, k: int) -> Iterator[Tuple[str, Decimal]]:
    ordered = sorted(totals.by_category.items(), key=lambda item: item[1], reverse=True)
    for name, amount in ordered[: max(0, k)]:
        yield name, amount
