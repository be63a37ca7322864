"""
Circulation tools: checkout, return, extension, loss and overdue tracking.

These are the tools that write to more than one document. The handlers only
validate input and open a library; ordering of the writes and the rollback of
a half-done checkout live in :class:`LoanService`.

A successful return whose item could not be updated comes back with
``success: true`` and a ``warning`` so the librarian can fix the item by hand.
"""

import logging
from datetime import date
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from ..library import library_scope
from .common import invalid_input, unexpected_error

logger = logging.getLogger(__name__)


# =============================================================================
# INPUT SCHEMAS
# =============================================================================


class CheckoutItemInput(BaseModel):
    """Input schema for the checkout_item tool."""

    member_id: str = Field(..., description="ID of the borrowing member", min_length=1)
    item_id: str = Field(..., description="ID of the item to lend", min_length=1)
    period_days: int | None = Field(
        default=None,
        description="Loan length in days. Uses the default loan period if omitted",
        ge=1,
        le=365,
        examples=[7, 14, 28],
    )


class LoanIdInput(BaseModel):
    """Input schema for tools that act on a single loan."""

    loan_id: str = Field(..., description="ID of the loan", min_length=1)


class ExtendLoanInput(LoanIdInput):
    additional_days: int | None = Field(
        default=None,
        description="Days to add to the due date. Uses the default loan period if omitted",
        ge=1,
        le=365,
    )


class OverdueScanInput(BaseModel):
    as_of: date | None = Field(
        default=None,
        description="Reference date (yyyy-MM-dd). Defaults to today",
        examples=["2024-02-01"],
    )


class MemberLoansInput(BaseModel):
    member_id: str = Field(..., description="ID of the member", min_length=1)
    active_only: bool = Field(default=False, description="Only loans with status active")


class ItemIdInput(BaseModel):
    item_id: str = Field(..., description="ID of the item", min_length=1)


# =============================================================================
# WORKFLOW HANDLERS
# =============================================================================


async def checkout_item_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """
    Handler for the checkout_item tool.

    Fails without writing anything when the member is not active or the item
    is not available. If the item cannot be marked on loan after the loan row
    was written, the loan row is removed again and the item error returned.
    """
    try:
        params = CheckoutItemInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("checkout_item", e)

    try:
        with library_scope() as library:
            result = library.loans.checkout(params.member_id, params.item_id, params.period_days)
        if not result.success:
            logger.info("Checkout refused: %s", result.error)
        return result.to_payload()
    except Exception as e:
        return unexpected_error("checkout_item", e)


async def return_item_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handler for the return_item tool."""
    try:
        params = LoanIdInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("return_item", e)

    try:
        with library_scope() as library:
            result = library.loans.process_return(params.loan_id)
        return result.to_payload()
    except Exception as e:
        return unexpected_error("return_item", e)


async def extend_loan_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handler for the extend_loan tool."""
    try:
        params = ExtendLoanInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("extend_loan", e)

    try:
        with library_scope() as library:
            result = library.loans.extend(params.loan_id, params.additional_days)
        return result.to_payload()
    except Exception as e:
        return unexpected_error("extend_loan", e)


async def mark_loan_lost_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    try:
        params = LoanIdInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("mark_loan_lost", e)

    try:
        with library_scope() as library:
            result = library.loans.mark_lost(params.loan_id)
        return result.to_payload()
    except Exception as e:
        return unexpected_error("mark_loan_lost", e)


async def update_overdue_statuses_handler(arguments: dict[str, Any] | None = None) -> dict[str, Any]:
    """
    Handler for the update_overdue_statuses tool.

    There is no scheduler; a client (or a cron job calling the server) runs
    this periodically. ``data`` is the number of loans moved to overdue.
    """
    try:
        params = OverdueScanInput.model_validate(arguments or {})
    except ValidationError as e:
        return invalid_input("update_overdue_statuses", e)

    try:
        with library_scope() as library:
            result = library.loans.update_overdue_statuses(params.as_of)
        return result.to_payload()
    except Exception as e:
        return unexpected_error("update_overdue_statuses", e)


# =============================================================================
# QUERY HANDLERS
# =============================================================================


async def list_active_loans_handler(arguments: dict[str, Any] | None = None) -> dict[str, Any]:  # noqa: ARG001
    try:
        with library_scope() as library:
            result = library.loans.get_active_loans()
        return result.to_payload()
    except Exception as e:
        return unexpected_error("list_active_loans", e)


async def list_overdue_loans_handler(arguments: dict[str, Any] | None = None) -> dict[str, Any]:
    try:
        params = OverdueScanInput.model_validate(arguments or {})
    except ValidationError as e:
        return invalid_input("list_overdue_loans", e)

    try:
        with library_scope() as library:
            result = library.loans.get_overdue_loans(params.as_of)
        return result.to_payload()
    except Exception as e:
        return unexpected_error("list_overdue_loans", e)


async def member_loans_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    try:
        params = MemberLoansInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("member_loans", e)

    try:
        with library_scope() as library:
            if params.active_only:
                result = library.loans.get_active_loans_by_member(params.member_id)
            else:
                result = library.loans.get_loans_by_member(params.member_id)
        return result.to_payload()
    except Exception as e:
        return unexpected_error("member_loans", e)


async def current_loan_for_item_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handler for the current_loan_for_item tool; ``data`` is omitted when the item is not lent."""
    try:
        params = ItemIdInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("current_loan_for_item", e)

    try:
        with library_scope() as library:
            result = library.loans.get_current_loan_for_item(params.item_id)
        return result.to_payload()
    except Exception as e:
        return unexpected_error("current_loan_for_item", e)


# =============================================================================
# TOOL REGISTRATION
# =============================================================================

checkout_item = {
    "name": "checkout_item",
    "description": (
        "Lend an item to a member. The member must be active and the item available. "
        "Creates an active loan due after the loan period and marks the item on loan."
    ),
    "inputSchema": CheckoutItemInput.model_json_schema(),
    "handler": checkout_item_handler,
}

return_item = {
    "name": "return_item",
    "description": (
        "Close a loan as returned today and make the item available again. "
        "Loans that are already returned or lost are rejected."
    ),
    "inputSchema": LoanIdInput.model_json_schema(),
    "handler": return_item_handler,
}

extend_loan = {
    "name": "extend_loan",
    "description": "Move the due date of an active loan back by the given number of days.",
    "inputSchema": ExtendLoanInput.model_json_schema(),
    "handler": extend_loan_handler,
}

mark_loan_lost = {
    "name": "mark_loan_lost",
    "description": "Close an active or overdue loan as lost and mark its item lost.",
    "inputSchema": LoanIdInput.model_json_schema(),
    "handler": mark_loan_lost_handler,
}

update_overdue_statuses = {
    "name": "update_overdue_statuses",
    "description": (
        "Mark every active loan whose due date has passed as overdue. "
        "Returns the number of loans updated."
    ),
    "inputSchema": OverdueScanInput.model_json_schema(),
    "handler": update_overdue_statuses_handler,
}

list_active_loans = {
    "name": "list_active_loans",
    "description": "List every loan with status active.",
    "inputSchema": {"type": "object", "properties": {}},
    "handler": list_active_loans_handler,
}

list_overdue_loans = {
    "name": "list_overdue_loans",
    "description": "List loans marked overdue and active loans already past their due date.",
    "inputSchema": OverdueScanInput.model_json_schema(),
    "handler": list_overdue_loans_handler,
}

member_loans = {
    "name": "member_loans",
    "description": "List the loans of one member, optionally only the active ones.",
    "inputSchema": MemberLoansInput.model_json_schema(),
    "handler": member_loans_handler,
}

current_loan_for_item = {
    "name": "current_loan_for_item",
    "description": "Show the open loan for an item, if it is currently lent.",
    "inputSchema": ItemIdInput.model_json_schema(),
    "handler": current_loan_for_item_handler,
}
