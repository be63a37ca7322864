"""
Database package for the Circulation Desk.

This package provides:
- SQLAlchemy tables for documents, their rows and settings (schema.py)
- Session management and connection handling (session.py)
- The document/catalog contracts and their SQL implementations (documents.py)
- Durable key/value settings (settings_store.py)
- Name-based discovery of the backing documents (locator.py)
- The generic row-to-record CRUD layer (record_store.py)
"""

from .documents import (
    CatalogEntry,
    DocumentCatalog,
    SharingInfo,
    SqlDocument,
    SqlDocumentCatalog,
    TabularDocument,
)
from .locator import (
    ADDRESS_KEYS,
    LAST_DISCOVERY_KEY,
    DiscoveredResource,
    DiscoveryReport,
    LocatorConfig,
    ResourceLocator,
)
from .record_store import RecordStore, generate_id
from .schema import Base, Document, DocumentRow, Setting
from .session import (
    DatabaseManager,
    get_db_manager,
    reset_db_manager,
    safe_commit,
    safe_query,
    session_scope,
)
from .settings_store import SettingsStore

__all__ = [
    "ADDRESS_KEYS",
    "LAST_DISCOVERY_KEY",
    "Base",
    "CatalogEntry",
    "DatabaseManager",
    "DiscoveredResource",
    "DiscoveryReport",
    "Document",
    "DocumentCatalog",
    "DocumentRow",
    "LocatorConfig",
    "RecordStore",
    "ResourceLocator",
    "Setting",
    "SettingsStore",
    "SharingInfo",
    "SqlDocument",
    "SqlDocumentCatalog",
    "TabularDocument",
    "generate_id",
    "get_db_manager",
    "reset_db_manager",
    "safe_commit",
    "safe_query",
    "session_scope",
]
