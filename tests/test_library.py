"""Tests for the service wiring."""

from circulation_desk.library import Library
from circulation_desk.models import ITEM_SCHEMA, MEMBER_SCHEMA, ErrorCode, ResourceKind


def test_services_share_one_locator(library: Library):
    assert library.members.locator is library.locator
    assert library.loans.members is library.members
    assert library.loans.items is library.items
    assert library.store_for("items") is library.items


def test_config_reaches_services(test_db_session, test_config):
    config = test_config.model_copy(update={"default_loan_days": 21, "items_prefix": "Catalogue"})

    library = Library.from_session(test_db_session, config)

    assert library.loans.default_loan_days == 21
    assert library.locator.prefix_for(ResourceKind.ITEMS) == "Catalogue"


def test_initialize_headers(library: Library, make_document, catalog):
    members = make_document("Members")
    items = make_document("Items", rows=[["i1", "Dune", "Frank Herbert", "book", "", "available", ""]])
    library.locator.locate_all()

    result = library.initialize_headers()

    assert result.success
    assert result.data == [ResourceKind.MEMBERS, ResourceKind.ITEMS]
    assert "loans" in result.warning
    assert catalog.open(members.address).read_rows() == [MEMBER_SCHEMA.header]
    assert catalog.open(items.address).read_rows()[0] == ITEM_SCHEMA.header
    assert [i.id for i in library.items.get_all().data] == ["i1"]


def test_initialize_headers_without_discovery(library: Library):
    result = library.initialize_headers()

    assert not result.success
    assert result.code == ErrorCode.RESOURCE_UNAVAILABLE
