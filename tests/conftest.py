"""Test configuration and fixtures for the Circulation Desk.

1. Isolated databases - each test gets its own SQLite file under tmp_path
2. Configuration overrides - no test reads the developer's environment
3. A fixed "today" so loan dates are predictable
4. Tool handlers patched to use the test library instead of the global session
"""

import os
from collections.abc import Callable, Generator
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from circulation_desk.config import DeskConfig, reset_config
from circulation_desk.database.documents import CatalogEntry, SqlDocumentCatalog
from circulation_desk.database.locator import ResourceLocator
from circulation_desk.database.schema import Base
from circulation_desk.database.settings_store import SettingsStore
from circulation_desk.library import Library
from circulation_desk.models.columns import ITEM_SCHEMA, LOAN_SCHEMA, MEMBER_SCHEMA
from circulation_desk.models.item import Item
from circulation_desk.models.member import Member

TODAY = date(2024, 1, 15)

TOOL_MODULES = (
    "circulation_desk.tools.setup",
    "circulation_desk.tools.members",
    "circulation_desk.tools.items",
    "circulation_desk.tools.circulation",
)


# === Test Database Fixtures ===


@pytest.fixture
def test_db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path for each test."""
    return tmp_path / "test_circulation.db"


@pytest.fixture
def test_database_url(test_db_path: Path) -> str:
    return f"sqlite:///{test_db_path}"


@pytest.fixture
def test_db_session(test_database_url: str) -> Generator[Session, None, None]:
    """Provide a SQLAlchemy session on a fresh schema."""
    engine = create_engine(
        test_database_url,
        echo=False,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)

    session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = session_local()

    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
        engine.dispose()


# === Configuration Fixtures ===


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Remove every CIRCULATION_DESK_* variable for the duration of a test."""
    original_env = os.environ.copy()

    for key in list(os.environ.keys()):
        if key.startswith("CIRCULATION_DESK_"):
            del os.environ[key]

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def test_config(test_db_path: Path, clean_env) -> Generator[DeskConfig, None, None]:  # noqa: ARG001
    """Provide a test-specific configuration."""
    reset_config()

    config = DeskConfig(
        server_name="test-circulation-desk",
        server_version="0.0.1-test",
        database_path=test_db_path,
        debug=True,
        log_level="DEBUG",
    )

    yield config

    reset_config()


# === Storage Fixtures ===


@pytest.fixture
def catalog(test_db_session: Session) -> SqlDocumentCatalog:
    return SqlDocumentCatalog(test_db_session)


@pytest.fixture
def settings(test_db_session: Session) -> SettingsStore:
    return SettingsStore(test_db_session)


@pytest.fixture
def locator(catalog: SqlDocumentCatalog, settings: SettingsStore) -> ResourceLocator:
    return ResourceLocator(catalog, settings)


@pytest.fixture
def make_document(catalog: SqlDocumentCatalog) -> Callable[..., CatalogEntry]:
    """Factory creating a document with the given rows and modification time."""

    def _make(
        name: str,
        rows: list[list] | None = None,
        modified_at: datetime | None = None,
        owner: str | None = None,
    ) -> CatalogEntry:
        return catalog.create_document(name, rows=rows, owner=owner, modified_at=modified_at)

    return _make


@pytest.fixture
def documents(make_document) -> dict[str, CatalogEntry]:
    """The three documents, each holding only its header row."""
    return {
        "members": make_document("Members", rows=[MEMBER_SCHEMA.header]),
        "items": make_document("Items", rows=[ITEM_SCHEMA.header]),
        "loans": make_document("Loans", rows=[LOAN_SCHEMA.header]),
    }


# === Library Fixtures ===


@pytest.fixture
def library(test_db_session: Session, test_config: DeskConfig) -> Library:
    """A library whose clock is fixed at ``TODAY``; nothing discovered yet."""
    return Library.from_session(test_db_session, test_config, today=lambda: TODAY)


@pytest.fixture
def ready_library(library: Library, documents) -> Library:  # noqa: ARG001
    """A library with all three documents discovered."""
    library.locator.locate_all().unwrap()
    return library


@pytest.fixture
def member(ready_library: Library) -> Member:
    return ready_library.members.create_member("Ada Lovelace", "ada@example.org").unwrap()


@pytest.fixture
def item(ready_library: Library) -> Item:
    return ready_library.items.create_item("Dune", "Frank Herbert", external_code="9780441013593").unwrap()


@pytest.fixture
def mock_library_scope(ready_library: Library, monkeypatch) -> Library:
    """Make every tool handler use the test library.

    Handlers normally open their own session through ``library_scope``; the
    patch hands them the test library so they see the test data.
    """

    @contextmanager
    def _mock_library_scope(config=None):  # noqa: ARG001
        yield ready_library

    for module in TOOL_MODULES:
        monkeypatch.setattr(f"{module}.library_scope", _mock_library_scope)

    return ready_library
