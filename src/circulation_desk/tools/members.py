"""
Member tools.

Registration, edits, status changes and lookups over the members document.
Suspension and deactivation only change the member's status; existing loans
are left as they are, but a non-active member cannot borrow.
"""

import logging
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from ..library import library_scope
from ..models.member import MemberStatus
from .common import invalid_input, unexpected_error

logger = logging.getLogger(__name__)


class CreateMemberInput(BaseModel):
    """Input schema for the create_member tool."""

    name: str = Field(..., description="Full name of the member", examples=["Ada Lovelace"])
    email: str = Field(..., description="Contact email", examples=["ada@example.org"])
    phone: str = Field(default="", description="Optional phone number")
    notes: str = Field(default="", description="Free-form notes", max_length=1000)


class MemberIdInput(BaseModel):
    member_id: str = Field(..., description="ID of the member", min_length=1)


class UpdateMemberInput(MemberIdInput):
    """Only the fields given are changed; the merged member is validated."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    notes: str | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude={"member_id"}, exclude_none=True)


class SuspendMemberInput(MemberIdInput):
    reason: str = Field(default="", description="Why the member is suspended", max_length=500)


class ListMembersInput(BaseModel):
    status: MemberStatus | None = Field(default=None, description="Only members with this status")


class SearchMembersInput(BaseModel):
    query: str = Field(..., description="Case-insensitive text matched against name and email", min_length=1)


async def create_member_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handler for the create_member tool. New members are active and join today."""
    try:
        params = CreateMemberInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("create_member", e)

    try:
        with library_scope() as library:
            result = library.members.create_member(
                params.name, params.email, phone=params.phone, notes=params.notes
            )
        return result.to_payload()
    except Exception as e:
        return unexpected_error("create_member", e)


async def update_member_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    try:
        params = UpdateMemberInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("update_member", e)

    try:
        with library_scope() as library:
            result = library.members.update_member(params.member_id, params.changes())
        return result.to_payload()
    except Exception as e:
        return unexpected_error("update_member", e)


async def get_member_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    try:
        params = MemberIdInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("get_member", e)

    try:
        with library_scope() as library:
            result = library.members.get_by_id(params.member_id)
        return result.to_payload()
    except Exception as e:
        return unexpected_error("get_member", e)


async def list_members_handler(arguments: dict[str, Any] | None = None) -> dict[str, Any]:
    try:
        params = ListMembersInput.model_validate(arguments or {})
    except ValidationError as e:
        return invalid_input("list_members", e)

    try:
        with library_scope() as library:
            if params.status is None:
                result = library.members.get_all()
            else:
                result = library.members.get_by_status(params.status)
        return result.to_payload()
    except Exception as e:
        return unexpected_error("list_members", e)


async def search_members_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    try:
        params = SearchMembersInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("search_members", e)

    try:
        with library_scope() as library:
            result = library.members.search_members(params.query)
        return result.to_payload()
    except Exception as e:
        return unexpected_error("search_members", e)


async def suspend_member_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handler for the suspend_member tool. The reason replaces the member's notes."""
    try:
        params = SuspendMemberInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("suspend_member", e)

    try:
        with library_scope() as library:
            result = library.members.suspend_member(params.member_id, params.reason)
        return result.to_payload()
    except Exception as e:
        return unexpected_error("suspend_member", e)


async def reactivate_member_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    try:
        params = MemberIdInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("reactivate_member", e)

    try:
        with library_scope() as library:
            result = library.members.reactivate_member(params.member_id)
        return result.to_payload()
    except Exception as e:
        return unexpected_error("reactivate_member", e)


async def deactivate_member_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    try:
        params = MemberIdInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("deactivate_member", e)

    try:
        with library_scope() as library:
            result = library.members.deactivate_member(params.member_id)
        return result.to_payload()
    except Exception as e:
        return unexpected_error("deactivate_member", e)


async def delete_member_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handler for the delete_member tool. Loans keep the removed member's ID."""
    try:
        params = MemberIdInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("delete_member", e)

    try:
        with library_scope() as library:
            result = library.members.delete(params.member_id)
        return result.to_payload()
    except Exception as e:
        return unexpected_error("delete_member", e)


async def check_member_standing_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    try:
        params = MemberIdInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("check_member_standing", e)

    try:
        with library_scope() as library:
            result = library.members.is_in_good_standing(params.member_id)
        return result.to_payload()
    except Exception as e:
        return unexpected_error("check_member_standing", e)


# =============================================================================
# TOOL REGISTRATION
# =============================================================================

create_member = {
    "name": "create_member",
    "description": "Register a new member. Name and a valid email are required.",
    "inputSchema": CreateMemberInput.model_json_schema(),
    "handler": create_member_handler,
}

update_member = {
    "name": "update_member",
    "description": "Change a member's name, email, phone or notes.",
    "inputSchema": UpdateMemberInput.model_json_schema(),
    "handler": update_member_handler,
}

get_member = {
    "name": "get_member",
    "description": "Look up a member by ID.",
    "inputSchema": MemberIdInput.model_json_schema(),
    "handler": get_member_handler,
}

list_members = {
    "name": "list_members",
    "description": "List members, optionally only those with a given status.",
    "inputSchema": ListMembersInput.model_json_schema(),
    "handler": list_members_handler,
}

search_members = {
    "name": "search_members",
    "description": "Find members whose name or email contains the query.",
    "inputSchema": SearchMembersInput.model_json_schema(),
    "handler": search_members_handler,
}

suspend_member = {
    "name": "suspend_member",
    "description": "Suspend a member so they cannot borrow. The reason is kept in the notes.",
    "inputSchema": SuspendMemberInput.model_json_schema(),
    "handler": suspend_member_handler,
}

reactivate_member = {
    "name": "reactivate_member",
    "description": "Make a suspended or inactive member active again.",
    "inputSchema": MemberIdInput.model_json_schema(),
    "handler": reactivate_member_handler,
}

deactivate_member = {
    "name": "deactivate_member",
    "description": "Mark a member inactive (left the library).",
    "inputSchema": MemberIdInput.model_json_schema(),
    "handler": deactivate_member_handler,
}

delete_member = {
    "name": "delete_member",
    "description": "Remove a member record. Deactivate members who have borrowed instead.",
    "inputSchema": MemberIdInput.model_json_schema(),
    "handler": delete_member_handler,
}

check_member_standing = {
    "name": "check_member_standing",
    "description": "Report whether a member is active and may borrow.",
    "inputSchema": MemberIdInput.model_json_schema(),
    "handler": check_member_standing_handler,
}
