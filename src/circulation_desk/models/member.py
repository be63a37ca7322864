"""
Member model for the Circulation Desk.

A member is a person who can borrow items. Only members in good standing
(status ``active``) may check items out; suspension and deactivation are
plain status transitions recorded on the member's row.
"""

from enum import Enum

from pydantic import Field

from .record import Record


class MemberStatus(str, Enum):
    """Enumeration of possible member statuses."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    INACTIVE = "inactive"


class Member(Record):
    """
    Represents a library member.

    Rows are stored in the order ``id, name, email, phone, status, joinDate,
    notes``.
    """

    name: str = Field(
        default="",
        description="Full name of the member",
        examples=["John Smith", "Maria Garcia"],
    )

    email: str = Field(
        default="",
        description="Email address used for notices",
        examples=["john.smith@example.com"],
    )

    phone: str = Field(
        default="",
        description="Contact phone number",
        examples=["555-123-4567"],
    )

    status: str = Field(
        default=MemberStatus.ACTIVE.value,
        description="Membership status: active, suspended or inactive",
    )

    join_date: str = Field(
        default="",
        description="Date the member joined, yyyy-MM-dd",
        examples=["2024-01-15"],
    )

    notes: str = Field(
        default="",
        description="Free-form notes, e.g. the reason for a suspension",
    )

    @property
    def is_in_good_standing(self) -> bool:
        """Only active members may borrow."""
        return self.status == MemberStatus.ACTIVE.value
