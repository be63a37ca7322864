"""
Validation utilities for library records.

Pure functions with no access to documents. Each validator collects every
violated rule, in a fixed order, so callers can show the full list at once.
Inputs are mappings keyed by the snake_case field names; pass
``record.model_dump()`` or a plain dict of the fields being written.
"""

import re
from collections.abc import Mapping
from datetime import date, timedelta
from typing import Any

from pydantic import BaseModel, Field

from .models.item import ItemStatus, ItemType
from .models.loan import Loan, LoanStatus
from .models.member import MemberStatus

VALID_MEMBER_STATUSES = tuple(s.value for s in MemberStatus)
VALID_ITEM_STATUSES = tuple(s.value for s in ItemStatus)
VALID_ITEM_TYPES = tuple(t.value for t in ItemType)
VALID_LOAN_STATUSES = tuple(s.value for s in LoanStatus)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class ValidationResult(BaseModel):
    """Aggregate outcome of a validator."""

    valid: bool
    errors: list[str] = Field(default_factory=list)


def _blank(value: Any) -> bool:
    return value is None or not str(value).strip()


def _result(errors: list[str]) -> ValidationResult:
    return ValidationResult(valid=not errors, errors=errors)


def validate_member(member: Mapping[str, Any]) -> ValidationResult:
    """Validate member fields."""
    errors: list[str] = []

    if _blank(member.get("name")):
        errors.append("Name is required")

    email = member.get("email")
    if _blank(email):
        errors.append("Email is required")
    elif not EMAIL_PATTERN.match(str(email)):
        errors.append("Email format is invalid")

    status = member.get("status")
    if status and status not in VALID_MEMBER_STATUSES:
        errors.append(f"Invalid status: {status}")

    join_date = member.get("join_date")
    if join_date and not DATE_PATTERN.match(str(join_date)):
        errors.append("Join date must be in yyyy-MM-dd format")

    return _result(errors)


def validate_item(item: Mapping[str, Any]) -> ValidationResult:
    """Validate item fields."""
    errors: list[str] = []

    if _blank(item.get("title")):
        errors.append("Title is required")

    if _blank(item.get("author")):
        errors.append("Author is required")

    item_type = item.get("type")
    if item_type and item_type not in VALID_ITEM_TYPES:
        errors.append(f"Invalid type: {item_type}")

    status = item.get("status")
    if status and status not in VALID_ITEM_STATUSES:
        errors.append(f"Invalid status: {status}")

    return _result(errors)


def validate_loan(loan: Mapping[str, Any]) -> ValidationResult:
    """Validate loan fields, including the due-after-checkout rule."""
    errors: list[str] = []

    if _blank(loan.get("member_id")):
        errors.append("Member ID is required")

    if _blank(loan.get("item_id")):
        errors.append("Item ID is required")

    checkout_date = loan.get("checkout_date")
    if checkout_date and not DATE_PATTERN.match(str(checkout_date)):
        errors.append("Checkout date must be in yyyy-MM-dd format")

    due_date = loan.get("due_date")
    if due_date and not DATE_PATTERN.match(str(due_date)):
        errors.append("Due date must be in yyyy-MM-dd format")

    return_date = loan.get("return_date")
    if return_date and (
        not DATE_PATTERN.match(str(return_date)) or parse_date(return_date) is None
    ):
        errors.append("Return date must be in yyyy-MM-dd format")

    status = loan.get("status")
    if status and status not in VALID_LOAN_STATUSES:
        errors.append(f"Invalid status: {status}")

    # Business rule: due date must be after checkout date
    checkout = parse_date(checkout_date)
    due = parse_date(due_date)
    if checkout and due and due <= checkout:
        errors.append("Due date must be after checkout date")

    return _result(errors)


def parse_date(value: Any) -> date | None:
    """Parse a ``yyyy-MM-dd`` string; anything else yields ``None``."""
    if isinstance(value, date):
        return value
    if not value or not DATE_PATTERN.match(str(value)):
        return None
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        return None


def format_date(value: date) -> str:
    """Format a date as ``yyyy-MM-dd``."""
    return value.strftime("%Y-%m-%d")


def calculate_due_date(checkout_date: date, loan_days: int) -> date:
    """Calendar-day arithmetic; weekends and holidays are not skipped."""
    return checkout_date + timedelta(days=loan_days)


def is_loan_overdue(loan: Loan, as_of: date | None = None) -> bool:
    """An active loan is overdue once the whole due day has passed."""
    if loan.status != LoanStatus.ACTIVE.value:
        return False

    due = parse_date(loan.due_date)
    if due is None:
        return False

    return (as_of or date.today()) > due


def days_overdue(loan: Loan, as_of: date | None = None) -> int:
    """Number of whole days past the due date, zero when not overdue."""
    if not is_loan_overdue(loan, as_of):
        return 0

    due = parse_date(loan.due_date)
    return max(0, ((as_of or date.today()) - due).days)  # type: ignore[operator]
