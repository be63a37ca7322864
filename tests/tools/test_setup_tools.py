"""Tests for the setup tools and the tool registry.

These run against a library with nothing discovered yet, so the handlers
are patched with ``library`` rather than ``ready_library``.
"""

import inspect
from contextlib import contextmanager

import pytest

from circulation_desk.library import Library
from circulation_desk.tools import all_tools
from circulation_desk.tools.setup import (
    check_access_handler,
    clear_configuration_handler,
    create_document_handler,
    discover_documents_handler,
    initialize_headers_handler,
    set_access_control_handler,
    show_configuration_handler,
)

TOOL_MODULES = (
    "circulation_desk.tools.setup",
    "circulation_desk.tools.members",
)


@pytest.fixture
def fresh_scope(library: Library, monkeypatch) -> Library:
    @contextmanager
    def _scope(config=None):  # noqa: ARG001
        yield library

    for module in TOOL_MODULES:
        monkeypatch.setattr(f"{module}.library_scope", _scope)
    return library


@pytest.mark.usefixtures("fresh_scope")
class TestDiscoveryTools:
    async def test_first_run(self):
        for kind in ("members", "items", "loans"):
            created = await create_document_handler({"kind": kind})
            assert created["success"] is True

        discovered = await discover_documents_handler()
        assert discovered["success"] is True
        assert len(discovered["data"]["resolved"]) == 3

        shown = await show_configuration_handler()
        assert set(shown["data"]["addresses"]) == {"members", "items", "loans"}
        assert shown["data"]["last_discovery_date"]

        headers = await initialize_headers_handler()
        assert headers["data"] == ["members", "items", "loans"]

    async def test_partial_discovery_warns(self):
        await create_document_handler({"kind": "members"})

        result = await discover_documents_handler({})

        assert result["success"] is True
        assert result["warning"].startswith("Partial discovery. Missing:")

    async def test_nothing_to_discover(self):
        result = await discover_documents_handler()

        assert result["success"] is False
        assert result["code"] == "not_found"

    async def test_create_document_with_unmatched_name_warns(self):
        result = await create_document_handler({"kind": "items", "name": "Catalogue"})

        assert result["success"] is True
        assert "will not be found by discovery" in result["warning"]

    async def test_show_and_clear_configuration(self):
        await create_document_handler({"kind": "loans"})
        await discover_documents_handler({"kinds": ["loans"]})

        assert (await clear_configuration_handler())["success"] is True

        shown = await show_configuration_handler()
        assert "data" not in shown
        assert shown["warning"] == "No documents configured. Run discover_documents first."

    async def test_discover_rejects_unknown_kind(self):
        result = await discover_documents_handler({"kinds": ["shelves"]})

        assert result["code"] == "validation_failed"


class TestAccessTools:
    async def test_configure_and_check(self, fresh_scope: Library):
        entry = fresh_scope.catalog.create_document("Desk Access", owner="admin@example.org")

        configured = await set_access_control_handler({"address": entry.address})
        assert configured["data"]["owner"] == "admin@example.org"

        allowed = await check_access_handler({"identity": "ADMIN@example.org"})
        assert allowed["data"]["authorized"] is True

        denied = await check_access_handler({"identity": "someone@example.org"})
        assert denied["success"] is True
        assert denied["data"]["authorized"] is False

    async def test_set_unknown_document(self, fresh_scope: Library):  # noqa: ARG002
        result = await set_access_control_handler({"address": "nope"})

        assert result["code"] == "resource_unavailable"

    async def test_check_without_configuration(self, fresh_scope: Library):  # noqa: ARG002
        result = await check_access_handler({"identity": "someone@example.org"})

        assert result["data"]["error"] == "Access Control not configured. Contact administrator."


class TestRegistry:
    def test_tool_names_unique(self):
        names = [tool["name"] for tool in all_tools]

        assert len(names) == len(set(names))

    def test_every_tool_is_complete(self):
        for tool in all_tools:
            assert tool["description"]
            assert tool["inputSchema"]["type"] == "object"
            assert inspect.iscoroutinefunction(tool["handler"])
