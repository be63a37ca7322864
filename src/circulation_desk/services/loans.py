"""
Loan service: checkout, return, extension and overdue tracking.

This is the only place that writes to two documents in one operation. The
documents share no transaction, so each workflow orders its writes and
decides what to do when the second write fails:

- **checkout** creates the loan row first, then marks the item on loan. If
  the item update fails the new loan row is deleted again (the single
  compensating action in the system).
- **process_return** closes the loan first, then marks the item available.
  If the item update fails the return stands and the failure is reported as
  a warning for manual correction.
- **mark_lost** behaves like a return: the loan is closed as lost and the
  item is marked lost, with item failures reported as warnings.

The service never writes item rows itself; it always goes through
:class:`ItemService`.
"""

import logging
from collections.abc import Callable
from datetime import date

from ..database.locator import ResourceLocator
from ..database.record_store import RecordStore, generate_id
from ..models.columns import LOAN_SCHEMA
from ..models.loan import Loan, LoanStatus
from ..models.result import ErrorCode, OperationResult
from ..validation import (
    calculate_due_date,
    format_date,
    is_loan_overdue,
    parse_date,
    validate_loan,
)
from .items import ItemService
from .members import MemberService

logger = logging.getLogger(__name__)

DEFAULT_LOAN_DAYS = 14


class LoanService(RecordStore[Loan]):
    """
    Circulation workflows over the loans document.

    Args:
        locator: Resolves the loans document
        members: Member service used for the good-standing check
        items: Item service used for availability and item status updates
        today: Returns the current date; injectable for tests
        default_loan_days: Period used when none is given
        id_factory: Produces ids for new loans
    """

    def __init__(
        self,
        locator: ResourceLocator,
        members: MemberService,
        items: ItemService,
        today: Callable[[], date] = date.today,
        default_loan_days: int = DEFAULT_LOAN_DAYS,
        id_factory: Callable[[], str] = generate_id,
    ):
        super().__init__(locator, LOAN_SCHEMA, Loan, id_factory)
        self.members = members
        self.items = items
        self.today = today
        self.default_loan_days = default_loan_days

    # === Workflows ===

    def checkout(
        self, member_id: str, item_id: str, period_days: int | None = None
    ) -> OperationResult[Loan]:
        """
        Lend an item to a member.

        Preconditions: the member exists and is active, the item exists and
        is available. When a precondition fails nothing is written and the
        specific reason is returned.

        Args:
            member_id: Borrowing member
            item_id: Item to lend
            period_days: Loan length in calendar days (default loan period if None)

        Returns:
            The created loan, or the first failure encountered
        """
        days = self.default_loan_days if period_days is None else period_days
        checkout_day = self.today()
        fields = {
            "member_id": member_id,
            "item_id": item_id,
            "checkout_date": format_date(checkout_day),
            "due_date": format_date(calculate_due_date(checkout_day, days)),
            "return_date": "",
            "status": LoanStatus.ACTIVE.value,
        }

        validation = validate_loan(fields)
        if not validation.valid:
            return OperationResult.fail(
                ErrorCode.VALIDATION_FAILED,
                f"Invalid loan: {'; '.join(validation.errors)}",
                validation.errors,
            )

        standing = self.members.is_in_good_standing(member_id)
        if not standing.success:
            return OperationResult.propagate(standing)
        if not standing.data:
            return OperationResult.fail(
                ErrorCode.PRECONDITION_FAILED, "Member is not in good standing"
            )

        availability = self.items.is_available(item_id)
        if not availability.success:
            return OperationResult.propagate(availability)
        if not availability.data:
            return OperationResult.fail(
                ErrorCode.PRECONDITION_FAILED, "Item is not available for checkout"
            )

        created = self.create(fields)
        if not created.success:
            return created

        marked = self.items.mark_on_loan(item_id)
        if not marked.success:
            # Roll back the loan so the item is not left both available and lent
            rollback = self.delete(created.data.id)
            if not rollback.success:
                logger.error(
                    "Could not roll back loan %s after item update failure: %s",
                    created.data.id,
                    rollback.error,
                )
            return OperationResult.fail(
                marked.code or ErrorCode.RESOURCE_UNAVAILABLE,
                f"Failed to update item status: {marked.error}",
            )

        logger.info(
            "Checked out item %s to member %s until %s",
            item_id,
            member_id,
            created.data.due_date,
        )
        return created

    def process_return(self, loan_id: str) -> OperationResult[Loan]:
        """
        Close a loan as returned today and make the item available again.

        Returns:
            The closed loan. If the item could not be updated the result is
            still a success and carries a warning.
        """
        found = self.get_by_id(loan_id)
        if not found.success:
            return found

        loan = found.data
        if loan.status == LoanStatus.RETURNED.value:
            return OperationResult.fail(
                ErrorCode.PRECONDITION_FAILED, "This loan has already been returned"
            )
        if loan.status == LoanStatus.LOST.value:
            return OperationResult.fail(
                ErrorCode.PRECONDITION_FAILED, "This loan was closed as lost"
            )

        updated = self.update(
            loan_id,
            {"return_date": format_date(self.today()), "status": LoanStatus.RETURNED.value},
        )
        if not updated.success:
            return updated

        marked = self.items.mark_available(loan.item_id)
        if not marked.success:
            logger.warning("Failed to update item %s status: %s", loan.item_id, marked.error)
            return OperationResult.ok(
                updated.data, warning=f"Failed to update item status: {marked.error}"
            )

        logger.info("Loan %s returned", loan_id)
        return updated

    def extend(self, loan_id: str, additional_days: int | None = None) -> OperationResult[Loan]:
        """Push the due date of an active loan back by ``additional_days``."""
        days = self.default_loan_days if additional_days is None else additional_days
        if days < 1:
            message = "Extension must be at least one day"
            return OperationResult.fail(ErrorCode.VALIDATION_FAILED, message, [message])

        found = self.get_by_id(loan_id)
        if not found.success:
            return found

        loan = found.data
        if loan.status != LoanStatus.ACTIVE.value:
            return OperationResult.fail(
                ErrorCode.PRECONDITION_FAILED, "Can only extend active loans"
            )

        current_due = parse_date(loan.due_date)
        if current_due is None:
            message = f"Loan has an invalid due date: {loan.due_date!r}"
            return OperationResult.fail(ErrorCode.VALIDATION_FAILED, message, [message])

        new_due = format_date(calculate_due_date(current_due, days))
        return self.update(loan_id, {"due_date": new_due})

    def mark_lost(self, loan_id: str) -> OperationResult[Loan]:
        """Close an active or overdue loan as lost and mark its item lost."""
        found = self.get_by_id(loan_id)
        if not found.success:
            return found

        loan = found.data
        if not loan.is_open:
            return OperationResult.fail(
                ErrorCode.PRECONDITION_FAILED,
                "Only active or overdue loans can be marked lost",
            )

        updated = self.update(loan_id, {"status": LoanStatus.LOST.value})
        if not updated.success:
            return updated

        marked = self.items.mark_lost(loan.item_id)
        if not marked.success:
            logger.warning("Failed to mark item %s lost: %s", loan.item_id, marked.error)
            return OperationResult.ok(
                updated.data, warning=f"Failed to update item status: {marked.error}"
            )

        return updated

    def update_overdue_statuses(self, as_of: date | None = None) -> OperationResult[int]:
        """
        Move every active loan past its due date to ``overdue``.

        A loan is overdue when its due date is strictly before ``as_of``
        (today by default). A failed row update is logged and skipped; the
        returned count only includes successful transitions.
        """
        result = self.get_all()
        if not result.success:
            return OperationResult.propagate(result)

        today = as_of or self.today()
        updated_count = 0

        for loan in result.data:
            if loan.status != LoanStatus.ACTIVE.value:
                continue
            if parse_date(loan.due_date) is None:
                logger.warning("Loan %s has an unreadable due date %r", loan.id, loan.due_date)
                continue
            if not is_loan_overdue(loan, today):
                continue

            update = self.update(loan.id, {"status": LoanStatus.OVERDUE.value})
            if update.success:
                updated_count += 1
            else:
                logger.warning("Could not mark loan %s overdue: %s", loan.id, update.error)

        logger.info("Marked %d loans overdue", updated_count)
        return OperationResult.ok(updated_count)

    # === Projections ===

    def get_active_loans(self) -> OperationResult[list[Loan]]:
        return self.find_all(lambda loan: loan.status == LoanStatus.ACTIVE.value)

    def get_overdue_loans(self, as_of: date | None = None) -> OperationResult[list[Loan]]:
        """Loans already marked overdue plus active loans past their due date."""
        today = as_of or self.today()
        return self.find_all(
            lambda loan: loan.status == LoanStatus.OVERDUE.value or is_loan_overdue(loan, today)
        )

    def get_loans_by_member(self, member_id: str) -> OperationResult[list[Loan]]:
        return self.find_all(lambda loan: loan.member_id == member_id)

    def get_active_loans_by_member(self, member_id: str) -> OperationResult[list[Loan]]:
        return self.find_all(
            lambda loan: loan.member_id == member_id and loan.status == LoanStatus.ACTIVE.value
        )

    def get_current_loan_for_item(self, item_id: str) -> OperationResult[Loan | None]:
        """The open loan for an item, if any (first match wins)."""
        result = self.find_all(lambda loan: loan.item_id == item_id and loan.is_open)
        if not result.success:
            return OperationResult.propagate(result)
        return OperationResult.ok(result.data[0] if result.data else None)
