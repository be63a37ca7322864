"""Tests for the SQL-backed documents, catalog, settings store and session helpers."""

from datetime import datetime

import pytest
from sqlalchemy.exc import SQLAlchemyError

from circulation_desk.database.documents import SqlDocumentCatalog
from circulation_desk.database.schema import Setting
from circulation_desk.database.session import DatabaseManager, safe_query
from circulation_desk.database.settings_store import SettingsStore
from circulation_desk.models.result import ResourceUnavailableError


class TestSqlDocument:
    def test_append_and_read_in_order(self, catalog: SqlDocumentCatalog, make_document):
        entry = make_document("Scratch", rows=[["h1", "h2"]])
        document = catalog.open(entry.address)

        document.append_row(["a", "1"])
        document.append_row(["b", "2"])

        assert document.read_rows() == [["h1", "h2"], ["a", "1"], ["b", "2"]]

    def test_write_row(self, catalog: SqlDocumentCatalog, make_document):
        entry = make_document("Scratch", rows=[["h"], ["old"]])
        document = catalog.open(entry.address)

        document.write_row(1, ["new"])

        assert document.read_rows() == [["h"], ["new"]]

    def test_delete_row_shifts_later_rows_up(self, catalog: SqlDocumentCatalog, make_document):
        entry = make_document("Scratch", rows=[["h"], ["a"], ["b"], ["c"]])
        document = catalog.open(entry.address)

        document.delete_row(2)
        document.append_row(["d"])

        assert document.read_rows() == [["h"], ["a"], ["c"], ["d"]]

    def test_insert_row_at_top_shifts_rows_down(self, catalog: SqlDocumentCatalog, make_document):
        entry = make_document("Scratch", rows=[["a"], ["b"]])
        document = catalog.open(entry.address)

        document.insert_row_at_top(["h"])

        assert document.read_rows() == [["h"], ["a"], ["b"]]

    def test_missing_row_is_unavailable(self, catalog: SqlDocumentCatalog, make_document):
        entry = make_document("Scratch", rows=[["h"]])
        document = catalog.open(entry.address)

        with pytest.raises(ResourceUnavailableError):
            document.write_row(5, ["x"])

    def test_writes_bump_modified_time(self, catalog: SqlDocumentCatalog, make_document):
        old = datetime(2020, 1, 1)
        entry = make_document("Scratch", rows=[["h"]], modified_at=old)

        catalog.open(entry.address).append_row(["a"])

        [listed] = catalog.search("Scratch")
        assert listed.modified_at > old


class TestSqlDocumentCatalog:
    def test_search_matches_substrings(self, catalog: SqlDocumentCatalog, make_document):
        make_document("Items")
        make_document("Old Items")
        make_document("Members")

        names = sorted(entry.name for entry in catalog.search("Items"))

        assert names == ["Items", "Old Items"]

    def test_search_treats_wildcards_literally(self, catalog: SqlDocumentCatalog, make_document):
        make_document("Items_2024")
        make_document("ItemsX2024")

        names = [entry.name for entry in catalog.search("Items_")]

        assert names == ["Items_2024"]

    def test_trashed_documents_hidden_and_unopenable(self, catalog: SqlDocumentCatalog, make_document):
        entry = make_document("Items")
        catalog.trash(entry.address)

        assert catalog.search("Items") == []
        assert [e.name for e in catalog.search("Items", include_trashed=True)] == ["Items"]
        with pytest.raises(ResourceUnavailableError, match="trash"):
            catalog.open(entry.address)

    def test_unknown_address(self, catalog: SqlDocumentCatalog):
        with pytest.raises(ResourceUnavailableError, match="does not exist"):
            catalog.open("nope")

    def test_sharing(self, catalog: SqlDocumentCatalog, make_document):
        entry = make_document("Access", owner="admin@example.org")

        catalog.share(entry.address, "ed@example.org", role="editor")
        sharing = catalog.share(entry.address, "vi@example.org")

        assert sharing.owner == "admin@example.org"
        assert sharing.editors == ["ed@example.org"]
        assert sharing.viewers == ["vi@example.org"]

    def test_share_rejects_unknown_role(self, catalog: SqlDocumentCatalog, make_document):
        entry = make_document("Access")

        with pytest.raises(ValueError, match="Unknown sharing role"):
            catalog.share(entry.address, "x@example.org", role="commenter")


class TestSettingsStore:
    def test_set_get_overwrite_delete(self, settings: SettingsStore):
        assert settings.get("KEY") is None

        settings.set("KEY", "one")
        settings.set("KEY", "two")
        assert settings.get("KEY") == "two"
        assert settings.items() == {"KEY": "two"}

        settings.delete("KEY")
        settings.delete("KEY")
        assert settings.get("KEY") is None


class TestDatabaseManager:
    def test_init_and_verify(self, test_database_url: str):
        manager = DatabaseManager(test_database_url)
        manager.init_database()

        assert manager.verify_connection() is True
        manager.close()

    def test_session_scope_rolls_back_on_error(self, test_database_url: str):
        manager = DatabaseManager(test_database_url)
        manager.init_database()

        with pytest.raises(RuntimeError):
            with manager.session_scope() as session:
                SettingsStore(session).set("A", "1")
                session.add(Setting(key="B", value="2"))
                raise RuntimeError("boom")

        with manager.session_scope() as session:
            store = SettingsStore(session)
            # "A" was committed by the store itself; "B" was never flushed
            assert store.get("A") == "1"
            assert store.get("B") is None
        manager.close()

    def test_safe_query_translates_driver_errors(self, test_db_session):
        def failing(_session):
            raise SQLAlchemyError("driver exploded")

        with pytest.raises(ResourceUnavailableError, match="Reading things: storage query failed"):
            safe_query(test_db_session, failing, "Reading things")
