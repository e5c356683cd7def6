from dataclasses import replace
from decimal import Decimal, InvalidOperation
from typing import Any

from expenses.domain import Expense, ExpenseDraft
from expenses.errors import ValidationError
from expenses.functional import Either, Left, Right


def parse_amount(value: Any) -> Decimal:
    # bool is an int subclass; True is not an amount
    if isinstance(value, bool) or value is None:
        raise ValidationError("amount", value, f"Amount {value!r} is not a number")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        # str() keeps 0.1 as 0.1 instead of its binary expansion
        amount = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValidationError("amount", value, "Amount is required")
        # Decimal() would read "1_000" as 1000
        if "_" in text:
            raise ValidationError("amount", value, f"Amount {value!r} is not a number")
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise ValidationError("amount", value, f"Amount {value!r} is not a number") from None
    else:
        raise ValidationError("amount", value, f"Amount {value!r} is not a number")

    if not amount.is_finite():
        raise ValidationError("amount", value, f"Amount {value!r} is not a finite number")
    return amount


def clean_category(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("category", value, "Category is required")
    return value.strip()


def clean_note(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError("note", value, f"Note {value!r} is not text")
    return value.strip()


def validate_draft(amount: Any, category: Any, note: Any = "") -> Either[ValidationError, ExpenseDraft]:
    """Check raw form input and build a draft, or return the first problem found."""
    try:
        draft = ExpenseDraft(
            amount=parse_amount(amount),
            category=clean_category(category),
            note=clean_note(note),
        )
    except ValidationError as e:
        return Left(e)
    return Right(draft)


def validate_expense(e: Expense) -> Expense:
    """Return ``e`` with its amount as ``Decimal`` and its category stripped."""
    return replace(e, amount=parse_amount(e.amount), category=clean_category(e.category))
