"""
Loan model for the Circulation Desk.

A loan is the checkout transaction linking one member to one item:

    active --return--> returned            (terminal)
    active --overdue scan--> overdue
    overdue --return--> returned
    active | overdue --mark lost--> lost   (terminal)

Loans are only ever created by checkout, and closed loans are kept rather
than deleted.
"""

from enum import Enum

from pydantic import Field

from .record import Record


class LoanStatus(str, Enum):
    """Status of a loan."""

    ACTIVE = "active"
    RETURNED = "returned"
    OVERDUE = "overdue"
    LOST = "lost"


OPEN_LOAN_STATUSES = frozenset({LoanStatus.ACTIVE.value, LoanStatus.OVERDUE.value})
CLOSED_LOAN_STATUSES = frozenset({LoanStatus.RETURNED.value, LoanStatus.LOST.value})


class Loan(Record):
    """
    Represents a checkout transaction.

    Rows are stored in the order ``id, memberId, itemId, checkoutDate,
    dueDate, returnDate, status``.
    """

    member_id: str = Field(
        default="",
        description="ID of the borrowing member",
    )

    item_id: str = Field(
        default="",
        description="ID of the borrowed item",
    )

    checkout_date: str = Field(
        default="",
        description="Date the item was checked out, yyyy-MM-dd",
        examples=["2024-01-15"],
    )

    due_date: str = Field(
        default="",
        description="Date the item is due back, yyyy-MM-dd",
        examples=["2024-01-29"],
    )

    return_date: str = Field(
        default="",
        description="Date the item came back; empty while the loan is open",
    )

    status: str = Field(
        default=LoanStatus.ACTIVE.value,
        description="Loan status",
    )

    @property
    def is_open(self) -> bool:
        """True while the item is still out (active or overdue)."""
        return self.status in OPEN_LOAN_STATUSES

    @property
    def is_closed(self) -> bool:
        return self.status in CLOSED_LOAN_STATUSES
