"""
Member service.

Specialises the record store for members:

1. **Creation defaults**: new members start ``active`` and join today
2. **Validation**: name and email are checked before any write
3. **Status changes**: suspend, reactivate, deactivate
4. **Queries**: by status, and case-insensitive search over name and email
5. **Good standing**: the checkout precondition used by the loan service
"""

import logging
from collections.abc import Callable, Mapping
from datetime import date
from typing import Any

from ..database.locator import ResourceLocator
from ..database.record_store import RecordStore, generate_id
from ..models.columns import MEMBER_SCHEMA
from ..models.member import Member, MemberStatus
from ..models.result import ErrorCode, OperationResult
from ..validation import VALID_MEMBER_STATUSES, format_date, validate_member

logger = logging.getLogger(__name__)


class MemberService(RecordStore[Member]):
    """
    Data access and rules for library members.

    Args:
        locator: Resolves the members document
        today: Returns the current date; injectable for tests
        id_factory: Produces ids for new members
    """

    def __init__(
        self,
        locator: ResourceLocator,
        today: Callable[[], date] = date.today,
        id_factory: Callable[[], str] = generate_id,
    ):
        super().__init__(locator, MEMBER_SCHEMA, Member, id_factory)
        self.today = today

    def create_member(
        self, name: str, email: str, phone: str = "", notes: str = ""
    ) -> OperationResult[Member]:
        """
        Register a new member.

        The member starts ``active`` with today's date as join date.

        Returns:
            The created member, or ``VALIDATION_FAILED`` listing every problem
        """
        fields = {
            "name": name,
            "email": email,
            "phone": phone,
            "status": MemberStatus.ACTIVE.value,
            "join_date": format_date(self.today()),
            "notes": notes,
        }

        validation = validate_member(fields)
        if not validation.valid:
            return OperationResult.fail(
                ErrorCode.VALIDATION_FAILED,
                f"Invalid member: {'; '.join(validation.errors)}",
                validation.errors,
            )

        return self.create(fields)

    def update_member(self, id: str, changes: Mapping[str, Any]) -> OperationResult[Member]:
        """Apply edits after validating the merged member."""
        current = self.get_by_id(id)
        if not current.success:
            return current

        try:
            values = self._normalize(changes)
        except KeyError as e:
            return OperationResult.fail(ErrorCode.VALIDATION_FAILED, f"Unknown field: {e.args[0]}")

        validation = validate_member({**current.data.model_dump(), **values})
        if not validation.valid:
            return OperationResult.fail(
                ErrorCode.VALIDATION_FAILED,
                f"Invalid member: {'; '.join(validation.errors)}",
                validation.errors,
            )

        return self.update(id, values)

    def get_by_status(self, status: MemberStatus | str) -> OperationResult[list[Member]]:
        wanted = status.value if isinstance(status, MemberStatus) else status
        if wanted not in VALID_MEMBER_STATUSES:
            return OperationResult.fail(
                ErrorCode.VALIDATION_FAILED, f"Invalid status: {wanted}", [f"Invalid status: {wanted}"]
            )
        return self.find_all(lambda m: m.status == wanted)

    def get_active_members(self) -> OperationResult[list[Member]]:
        return self.get_by_status(MemberStatus.ACTIVE)

    def search_members(self, query: str) -> OperationResult[list[Member]]:
        """Case-insensitive substring search over name and email."""
        needle = query.lower()
        return self.find_all(
            lambda m: needle in m.name.lower() or needle in m.email.lower()
        )

    def suspend_member(self, id: str, reason: str = "") -> OperationResult[Member]:
        """Suspend a member; the reason replaces the member's notes."""
        notes = f"Suspended: {reason}" if reason else "Suspended"
        logger.info("Suspending member %s", id)
        return self.update(id, {"status": MemberStatus.SUSPENDED.value, "notes": notes})

    def reactivate_member(self, id: str) -> OperationResult[Member]:
        return self.update(id, {"status": MemberStatus.ACTIVE.value})

    def deactivate_member(self, id: str) -> OperationResult[Member]:
        return self.update(id, {"status": MemberStatus.INACTIVE.value})

    def is_in_good_standing(self, id: str) -> OperationResult[bool]:
        """True when the member exists and is active."""
        result = self.get_by_id(id)
        if not result.success:
            return OperationResult.propagate(result)
        return OperationResult.ok(result.data.is_in_good_standing)
