"""Tests for name-based document discovery."""

from datetime import datetime

import pytest

from circulation_desk.database.locator import (
    ADDRESS_KEYS,
    LAST_DISCOVERY_KEY,
    ResourceLocator,
)
from circulation_desk.database.settings_store import SettingsStore
from circulation_desk.models import ErrorCode, ResourceKind, ResourceUnavailableError


def at(day: int) -> datetime:
    return datetime(2024, 1, day, 12, 0)


class TestLocate:
    def test_newest_prefix_match_wins(self, locator: ResourceLocator, make_document, settings: SettingsStore):
        make_document("ItemsArchive", modified_at=at(1))
        make_document("Items", modified_at=at(2))
        newest = make_document("Items-v2", modified_at=at(3))
        # Contains the prefix but does not start with it
        make_document("Old Items", modified_at=at(9))

        result = locator.locate(ResourceKind.ITEMS)

        assert result.success
        assert result.data.name == "Items-v2"
        assert result.data.address == newest.address
        assert settings.get(ADDRESS_KEYS[ResourceKind.ITEMS]) == newest.address
        assert settings.get(LAST_DISCOVERY_KEY) is not None

    def test_prefix_is_case_sensitive(self, locator: ResourceLocator, make_document):
        make_document("items", modified_at=at(5))
        make_document("Items", modified_at=at(1))

        assert locator.locate("items").data.name == "Items"

    def test_trashed_documents_excluded(self, locator: ResourceLocator, make_document, catalog):
        make_document("Loans", modified_at=at(1))
        trashed = make_document("Loans 2024", modified_at=at(5))
        catalog.trash(trashed.address)

        assert locator.locate(ResourceKind.LOANS).data.name == "Loans"

    def test_no_match(self, locator: ResourceLocator, make_document, settings: SettingsStore):
        make_document("Old Items")

        result = locator.locate(ResourceKind.ITEMS)

        assert not result.success
        assert result.code == ErrorCode.NOT_FOUND
        assert result.error == 'Could not find a document starting with "Items"'
        assert settings.get(ADDRESS_KEYS[ResourceKind.ITEMS]) is None
        assert settings.get(LAST_DISCOVERY_KEY) is None

    def test_custom_prefixes(self, catalog, settings, make_document):
        make_document("Catalogue 2024")
        locator = ResourceLocator(catalog, settings, {"items": "Catalogue"})

        assert locator.locate(ResourceKind.ITEMS).data.name == "Catalogue 2024"
        assert locator.prefix_for(ResourceKind.MEMBERS) == "Members"

    def test_rediscovery_moves_to_newer_document(self, locator: ResourceLocator, make_document):
        make_document("Members", modified_at=at(1))
        locator.locate(ResourceKind.MEMBERS)
        replacement = make_document("Members (new)", modified_at=at(2))

        locator.locate(ResourceKind.MEMBERS)

        assert locator.address_for(ResourceKind.MEMBERS) == replacement.address


class TestLocateAll:
    def test_all_resolved(self, locator: ResourceLocator, documents):
        result = locator.locate_all()

        assert result.success
        assert result.warning is None
        assert {r.kind for r in result.data.resolved} == set(ResourceKind)
        assert result.data.missing == []

    def test_partial_discovery_is_success_with_warning(self, locator: ResourceLocator, make_document):
        make_document("Members")
        make_document("Items")

        result = locator.locate_all()

        assert result.success
        assert result.data.missing == [ResourceKind.LOANS]
        assert result.warning.startswith("Partial discovery. Missing:")
        assert '"Loans"' in result.warning

    def test_nothing_found_fails(self, locator: ResourceLocator, settings: SettingsStore):
        result = locator.locate_all()

        assert not result.success
        assert result.code == ErrorCode.NOT_FOUND
        assert result.error.startswith("No documents found.")
        assert settings.get(LAST_DISCOVERY_KEY) is None

    def test_unreachable_catalog_reports_unavailable(self, locator: ResourceLocator, catalog, monkeypatch):
        def unreachable(_name_contains):
            raise ResourceUnavailableError("Catalog offline")

        monkeypatch.setattr(catalog, "search", unreachable)

        result = locator.locate_all()

        assert not result.success
        assert result.code == ErrorCode.RESOURCE_UNAVAILABLE
        assert "Catalog offline" in result.error

    def test_subset_of_kinds(self, locator: ResourceLocator, make_document):
        make_document("Loans")

        result = locator.locate_all([ResourceKind.LOANS])

        assert result.success
        assert result.warning is None


class TestOpen:
    def test_open_before_discovery(self, locator: ResourceLocator):
        with pytest.raises(ResourceUnavailableError, match="No Members document configured. Run discovery first."):
            locator.open(ResourceKind.MEMBERS)

    def test_stale_address_is_not_revalidated(self, locator: ResourceLocator, documents, catalog):
        locator.locate_all()
        catalog.trash(documents["items"].address)

        with pytest.raises(ResourceUnavailableError, match="Could not access Items document. Run discovery first."):
            locator.open(ResourceKind.ITEMS)

        # The stale address stays until discovery runs again
        assert locator.address_for(ResourceKind.ITEMS) == documents["items"].address

    def test_opens_stored_document(self, locator: ResourceLocator, documents):
        locator.locate_all()

        document = locator.open(ResourceKind.LOANS)

        assert document.address == documents["loans"].address


class TestConfiguration:
    def test_current_config_none_before_discovery(self, locator: ResourceLocator):
        assert locator.current_config() is None

    def test_current_config_and_clear(self, locator: ResourceLocator, documents, settings: SettingsStore):
        locator.locate_all()

        config = locator.current_config()

        assert config.addresses[ResourceKind.MEMBERS] == documents["members"].address
        assert config.last_discovery_date is not None

        locator.clear()

        assert locator.current_config() is None
        assert settings.items() == {}
