"""Tests for the member service."""

from circulation_desk.library import Library
from circulation_desk.models import ErrorCode, Member, MemberStatus


class TestCreateMember:
    def test_new_member_is_active_and_joins_today(self, ready_library: Library):
        result = ready_library.members.create_member("Ada Lovelace", "ada@example.org", phone="555-0100")

        assert result.success
        assert result.data.status == MemberStatus.ACTIVE.value
        assert result.data.join_date == "2024-01-15"
        assert ready_library.members.get_by_id(result.data.id).data == result.data

    def test_invalid_member_not_written(self, ready_library: Library):
        result = ready_library.members.create_member("", "not-an-email")

        assert not result.success
        assert result.code == ErrorCode.VALIDATION_FAILED
        assert result.errors == ["Name is required", "Email format is invalid"]
        assert ready_library.members.get_all().data == []

    def test_requires_discovery(self, library: Library):
        result = library.members.create_member("Ada", "ada@example.org")

        assert result.code == ErrorCode.RESOURCE_UNAVAILABLE


class TestUpdateMember:
    def test_update_fields(self, ready_library: Library, member: Member):
        result = ready_library.members.update_member(member.id, {"phone": "555-0199", "notes": "VIP"})

        assert result.data.phone == "555-0199"
        assert result.data.notes == "VIP"
        assert result.data.email == member.email

    def test_merged_record_is_validated(self, ready_library: Library, member: Member):
        result = ready_library.members.update_member(member.id, {"email": "nope"})

        assert result.code == ErrorCode.VALIDATION_FAILED
        assert ready_library.members.get_by_id(member.id).data.email == member.email

    def test_unknown_field(self, ready_library: Library, member: Member):
        result = ready_library.members.update_member(member.id, {"favourite_colour": "blue"})

        assert result.error == "Unknown field: favourite_colour"

    def test_missing_member(self, ready_library: Library):
        assert ready_library.members.update_member("ghost", {"name": "x"}).code == ErrorCode.NOT_FOUND


class TestStatusChanges:
    def test_suspend_records_reason(self, ready_library: Library, member: Member):
        result = ready_library.members.suspend_member(member.id, "Unpaid fees")

        assert result.data.status == MemberStatus.SUSPENDED.value
        assert result.data.notes == "Suspended: Unpaid fees"

    def test_suspend_without_reason(self, ready_library: Library, member: Member):
        assert ready_library.members.suspend_member(member.id).data.notes == "Suspended"

    def test_reactivate_and_deactivate(self, ready_library: Library, member: Member):
        ready_library.members.suspend_member(member.id)

        assert ready_library.members.reactivate_member(member.id).data.status == "active"
        assert ready_library.members.deactivate_member(member.id).data.status == "inactive"

    def test_good_standing(self, ready_library: Library, member: Member):
        assert ready_library.members.is_in_good_standing(member.id).data is True

        ready_library.members.suspend_member(member.id)

        assert ready_library.members.is_in_good_standing(member.id).data is False

    def test_good_standing_of_unknown_member(self, ready_library: Library):
        result = ready_library.members.is_in_good_standing("ghost")

        assert not result.success
        assert result.code == ErrorCode.NOT_FOUND


class TestQueries:
    def test_by_status_and_search(self, ready_library: Library):
        members = ready_library.members
        ada = members.create_member("Ada Lovelace", "ada@example.org").data
        grace = members.create_member("Grace Hopper", "grace@navy.example").data
        members.suspend_member(grace.id)

        assert [m.id for m in members.get_active_members().data] == [ada.id]
        assert [m.id for m in members.get_by_status("suspended").data] == [grace.id]
        assert [m.id for m in members.search_members("HOPPER").data] == [grace.id]
        assert [m.id for m in members.search_members("example").data] == [ada.id, grace.id]
        assert members.search_members("turing").data == []

    def test_unknown_status_filter(self, ready_library: Library):
        result = ready_library.members.get_by_status("bogus")

        assert not result.success
        assert result.code == ErrorCode.VALIDATION_FAILED
        assert result.error == "Invalid status: bogus"
