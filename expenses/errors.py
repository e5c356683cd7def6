"""Errors raised by the expense core, store and service."""

from typing import Any


class ValidationError(ValueError):
    """Raised when an amount, category or timestamp is malformed."""

    def __init__(self, field: str, value: Any, message: str):
        super().__init__(message)
        self.field = field
        self.value = value
        self.message = message

    def as_dict(self) -> dict:
        return {"error": "invalid_" + self.field, "message": self.message, "value": self.value}


class ExpenseNotFoundError(LookupError):
    """Raised when no expense carries the requested id."""

    def __init__(self, expense_id: int):
        super().__init__(f"Expense with ID {expense_id} does not exist")
        self.expense_id = expense_id


class StorageError(IOError):
    """Raised when the SQLite store fails."""
