"""SQLite persistence for expenses.

One table, created on first use:

    expenses(id INTEGER PRIMARY KEY AUTOINCREMENT, amount TEXT, category TEXT,
             note TEXT, date TEXT NOT NULL)

Amounts are stored as decimal strings so they load back exactly. ``date`` is
the ISO-8601 creation instant and is never rewritten by ``update``.
"""

import sqlite3
import threading
from contextlib import contextmanager
from decimal import Decimal
from pathlib import Path
from typing import Iterator, NamedTuple, Optional, Tuple

from expenses.dates import now_iso
from expenses.domain import Expense, ExpenseDraft
from expenses.errors import ExpenseNotFoundError, StorageError, ValidationError
from expenses.logging_setup import get_logger
from expenses.validation import parse_amount

logger = get_logger("expenses.store")

TABLE_EXPENSES = "expenses"
MEMORY = ":memory:"


def _to_amount(value):
    try:
        return parse_amount(value)
    except ValidationError:
        # left as-is so the aggregator reports it
        logger.warning(f"Stored amount {value!r} is not a number")
        return value


def _row_to_expense(row: sqlite3.Row) -> Expense:
    return Expense(
        id=row["id"],
        amount=_to_amount(row["amount"]),
        category=row["category"],
        ts=row["date"],
        note=row["note"] or "",
    )


class _Result(NamedTuple):
    rows: list
    rowcount: int
    lastrowid: Optional[int]


class ExpenseStore:
    """Expense table in a SQLite file.

    Each call opens its own connection, commits and closes it, so callers on
    different threads never share a transaction. ``":memory:"`` databases
    vanish with their connection; they keep a single one behind a lock.
    """

    def __init__(self, path: str = MEMORY):
        self.path = path
        self._memory_conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()
        if path == MEMORY:
            self._memory_conn = self._connect()
        else:
            Path(path).parent.mkdir(parents=True, exist_ok=True)

    def __enter__(self) -> "ExpenseStore":
        self.setup()
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        if self._memory_conn is not None:
            self._memory_conn.close()
            self._memory_conn = None

    def _connect(self) -> sqlite3.Connection:
        try:
            # the in-memory connection is used from Streamlit's script threads
            conn = sqlite3.connect(self.path, check_same_thread=False)
        except sqlite3.Error as e:
            raise StorageError(f"Could not open the expense database at {self.path}: {e}") from e
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        if self._memory_conn is not None:
            with self._lock:
                yield self._memory_conn
            return
        conn = self._connect()
        try:
            yield conn
        finally:
            conn.close()

    def _execute(self, sql: str, params: tuple = ()) -> _Result:
        with self._connection() as conn:
            try:
                with conn:
                    cursor = conn.execute(sql, params)
                    rows = cursor.fetchall()
            except sqlite3.Error as e:
                logger.error(f"Query failed on {self.path}: {e}")
                raise StorageError(str(e)) from e
        return _Result(rows, cursor.rowcount, cursor.lastrowid)

    def setup(self) -> None:
        self._execute("PRAGMA journal_mode = WAL")
        self._execute(f"""
            CREATE TABLE IF NOT EXISTS {TABLE_EXPENSES} (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                amount TEXT,
                category TEXT,
                note TEXT,
                date TEXT NOT NULL
            )
        """)
        logger.debug(f"Expense table ready at {self.path}")

    def load(self) -> Tuple[Expense, ...]:
        result = self._execute(f"SELECT * FROM {TABLE_EXPENSES} ORDER BY id DESC")
        return tuple(_row_to_expense(row) for row in result.rows)

    def get(self, expense_id: int) -> Expense:
        result = self._execute(f"SELECT * FROM {TABLE_EXPENSES} WHERE id = ?", (expense_id,))
        if not result.rows:
            raise ExpenseNotFoundError(expense_id)
        return _row_to_expense(result.rows[0])

    def insert(self, draft: ExpenseDraft, ts: Optional[str] = None) -> Expense:
        ts = ts or now_iso()
        result = self._execute(
            f"INSERT INTO {TABLE_EXPENSES} (amount, category, note, date) VALUES (?, ?, ?, ?)",
            (str(draft.amount), draft.category, draft.note, ts),
        )
        logger.info(f"Added expense {result.lastrowid}: {draft.amount} {draft.category}")
        return Expense(id=result.lastrowid, amount=Decimal(draft.amount), category=draft.category, ts=ts, note=draft.note)

    def update(self, expense_id: int, draft: ExpenseDraft) -> Expense:
        result = self._execute(
            f"UPDATE {TABLE_EXPENSES} SET amount = ?, category = ?, note = ? WHERE id = ?",
            (str(draft.amount), draft.category, draft.note, expense_id),
        )
        if result.rowcount == 0:
            raise ExpenseNotFoundError(expense_id)
        logger.info(f"Edited expense {expense_id}: {draft.amount} {draft.category}")
        return self.get(expense_id)

    def delete(self, expense_id: int) -> None:
        result = self._execute(f"DELETE FROM {TABLE_EXPENSES} WHERE id = ?", (expense_id,))
        if result.rowcount == 0:
            raise ExpenseNotFoundError(expense_id)
        logger.info(f"Deleted expense {expense_id}")
