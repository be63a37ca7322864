"""
Tests for the circulation tools.

1. Input validation
2. Success payloads
3. Business rule failures surfaced as error payloads
4. Unexpected errors contained by the handler
"""

from circulation_desk.library import Library
from circulation_desk.models import Item, Member
from circulation_desk.tools.circulation import (
    checkout_item_handler,
    current_loan_for_item_handler,
    extend_loan_handler,
    list_active_loans_handler,
    list_overdue_loans_handler,
    mark_loan_lost_handler,
    member_loans_handler,
    return_item_handler,
    update_overdue_statuses_handler,
)


async def checkout(member: Member, item: Item, **extra) -> dict:
    return await checkout_item_handler({"member_id": member.id, "item_id": item.id, **extra})


class TestCheckoutItemTool:
    async def test_checkout_success(self, mock_library_scope: Library, member: Member, item: Item):
        result = await checkout(member, item)

        assert result["success"] is True
        assert result["data"]["member_id"] == member.id
        assert result["data"]["item_id"] == item.id
        assert result["data"]["due_date"] == "2024-01-29"
        assert result["data"]["status"] == "active"
        assert mock_library_scope.items.get_by_id(item.id).data.status == "on-loan"

    async def test_checkout_custom_period(self, mock_library_scope: Library, member: Member, item: Item):  # noqa: ARG002
        result = await checkout(member, item, period_days=7)

        assert result["data"]["due_date"] == "2024-01-22"

    async def test_invalid_input(self, mock_library_scope: Library):  # noqa: ARG002
        result = await checkout_item_handler({"member_id": "", "period_days": 0})

        assert result["success"] is False
        assert result["code"] == "validation_failed"
        assert result["error"].startswith("Invalid checkout_item parameters")
        assert len(result["errors"]) == 3

    async def test_member_not_in_good_standing(self, mock_library_scope: Library, member: Member, item: Item):
        mock_library_scope.members.suspend_member(member.id)

        result = await checkout(member, item)

        assert result == {
            "success": False,
            "error": "Member is not in good standing",
            "code": "precondition_failed",
            "errors": [],
        }

    async def test_unexpected_error_is_contained(self, mock_library_scope: Library, member: Member, item: Item, monkeypatch):
        def explode(*_args, **_kwargs):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(mock_library_scope.loans, "checkout", explode)

        result = await checkout(member, item)

        assert result["success"] is False
        assert result["error"] == "An unexpected error occurred: disk on fire"


class TestLoanLifecycleTools:
    async def test_return_extend_and_lose(self, mock_library_scope: Library, member: Member, item: Item):
        loan_id = (await checkout(member, item))["data"]["id"]

        extended = await extend_loan_handler({"loan_id": loan_id, "additional_days": 7})
        assert extended["data"]["due_date"] == "2024-02-05"

        returned = await return_item_handler({"loan_id": loan_id})
        assert returned["success"] is True
        assert returned["data"]["status"] == "returned"
        assert "warning" not in returned

        again = await return_item_handler({"loan_id": loan_id})
        assert again["code"] == "precondition_failed"

        second_id = (await checkout(member, item))["data"]["id"]
        lost = await mark_loan_lost_handler({"loan_id": second_id})
        assert lost["data"]["status"] == "lost"
        assert mock_library_scope.items.get_by_id(item.id).data.status == "lost"

    async def test_return_unknown_loan(self, mock_library_scope: Library):  # noqa: ARG002
        result = await return_item_handler({"loan_id": "ghost"})

        assert result["code"] == "not_found"

    async def test_extend_rejects_zero_days(self, mock_library_scope: Library):  # noqa: ARG002
        result = await extend_loan_handler({"loan_id": "x", "additional_days": 0})

        assert result["code"] == "validation_failed"


class TestOverdueTools:
    async def test_scan_and_list(self, mock_library_scope: Library, member: Member, item: Item):  # noqa: ARG002
        loan_id = (await checkout(member, item))["data"]["id"]

        listed = await list_overdue_loans_handler({"as_of": "2024-02-01"})
        assert [loan["id"] for loan in listed["data"]] == [loan_id]

        scanned = await update_overdue_statuses_handler({"as_of": "2024-02-01"})
        assert scanned == {"success": True, "data": 1, "errors": []}

        active = await list_active_loans_handler()
        assert active["data"] == []

    async def test_bad_date(self, mock_library_scope: Library):  # noqa: ARG002
        result = await update_overdue_statuses_handler({"as_of": "first of February"})

        assert result["code"] == "validation_failed"


class TestQueryTools:
    async def test_member_and_item_views(self, mock_library_scope: Library, member: Member, item: Item):  # noqa: ARG002
        loan_id = (await checkout(member, item))["data"]["id"]

        all_loans = await member_loans_handler({"member_id": member.id})
        assert [loan["id"] for loan in all_loans["data"]] == [loan_id]

        current = await current_loan_for_item_handler({"item_id": item.id})
        assert current["data"]["id"] == loan_id

        await return_item_handler({"loan_id": loan_id})

        active_only = await member_loans_handler({"member_id": member.id, "active_only": True})
        assert active_only["data"] == []

        current = await current_loan_for_item_handler({"item_id": item.id})
        assert current["success"] is True
        assert "data" not in current
