from datetime import datetime
from typing import Callable, Iterable, Optional, Tuple

from expenses.dates import SUNDAY, parse_timestamp, start_of_month, start_of_week, to_local
from expenses.domain import Expense, FilterMode
from expenses.errors import ValidationError

OnError = Callable[[Expense, ValidationError], None]


def since(start: datetime):
    """Predicate for records created on or after ``start``; no upper bound."""
    def _filter(e: Expense) -> bool:
        return to_local(parse_timestamp(e.ts), start.tzinfo) >= start

    return _filter


def period_start(mode: FilterMode, now: datetime, first_weekday: int = SUNDAY) -> Optional[datetime]:
    if mode is FilterMode.WEEK:
        return start_of_week(now, first_weekday)
    if mode is FilterMode.MONTH:
        return start_of_month(now)
    return None


def period_predicate(mode: FilterMode, now: datetime, first_weekday: int = SUNDAY) -> Callable[[Expense], bool]:
    start = period_start(mode, now, first_weekday)
    if start is None:
        return lambda e: True
    return since(start)


def filter_expenses(
    records: Iterable[Expense],
    mode: FilterMode,
    now: Optional[datetime] = None,
    on_error: Optional[OnError] = None,
    first_weekday: int = SUNDAY,
) -> Tuple[Expense, ...]:
    """Return the records that fall in the window selected by ``mode``.

    Input order is kept. ``FilterMode.ALL`` returns every record without
    looking at timestamps. A record whose timestamp cannot be parsed raises
    ``ValidationError``, unless ``on_error`` is given, in which case it is left
    out and handed to ``on_error`` together with the error.
    """
    if mode is FilterMode.ALL:
        return tuple(records)

    pred = period_predicate(mode, now or datetime.now(), first_weekday)
    kept = []
    for e in records:
        try:
            matched = pred(e)
        except ValidationError as err:
            if on_error is None:
                raise
            on_error(e, err)
            continue
        if matched:
            kept.append(e)
    return tuple(kept)
