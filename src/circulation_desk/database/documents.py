"""
Tabular documents and the catalog that lists them.

Two contracts sit at the storage boundary:

1. **TabularDocument** - an opened, row-addressable table. Row 0 is the
   header; every call is durable on its own (there is no transaction that
   spans two calls, let alone two documents).
2. **DocumentCatalog** - lists candidate documents by name with their
   last-modified timestamps, opens them by address, and exposes sharing
   metadata for access checks.

The SQLAlchemy implementations below keep documents in the ``documents`` and
``document_rows`` tables. Each mutating call commits immediately so that a
failure part-way through a multi-document workflow leaves earlier writes in
place, exactly as a remote spreadsheet would.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from ..models.result import ResourceUnavailableError
from .schema import Document, DocumentRow
from .session import safe_commit, safe_query

logger = logging.getLogger(__name__)


class CatalogEntry(BaseModel):
    """A candidate document as listed by the catalog."""

    address: str
    name: str
    modified_at: datetime
    trashed: bool = False


class SharingInfo(BaseModel):
    """Who can see a document."""

    owner: str | None = None
    editors: list[str] = Field(default_factory=list)
    viewers: list[str] = Field(default_factory=list)


class TabularDocument(ABC):
    """An opened table whose rows are addressed by position (0 = header)."""

    address: str
    name: str

    @abstractmethod
    def read_rows(self) -> list[list[Any]]:
        """Return every row, header included, in position order."""

    @abstractmethod
    def append_row(self, values: list[Any]) -> None:
        """Add one row after the last row."""

    @abstractmethod
    def write_row(self, index: int, values: list[Any]) -> None:
        """Overwrite the cells of the row at ``index``."""

    @abstractmethod
    def delete_row(self, index: int) -> None:
        """Remove the row at ``index``; later rows shift up."""

    @abstractmethod
    def insert_row_at_top(self, values: list[Any]) -> None:
        """Insert a row at position 0; existing rows shift down."""


class DocumentCatalog(ABC):
    """Name-based listing of documents."""

    @abstractmethod
    def search(self, name_contains: str, include_trashed: bool = False) -> list[CatalogEntry]:
        """List documents whose name contains ``name_contains``."""

    @abstractmethod
    def open(self, address: str) -> TabularDocument:
        """
        Open a document by address.

        Raises:
            ResourceUnavailableError: If the address is unknown or trashed
        """

    @abstractmethod
    def sharing(self, address: str) -> SharingInfo:
        """
        Return the sharing metadata of a document.

        Raises:
            ResourceUnavailableError: If the address is unknown
        """


class SqlDocument(TabularDocument):
    """A document stored as position-ordered rows in ``document_rows``."""

    def __init__(self, session: Session, document: Document):
        self.session = session
        self._document = document
        self.address = document.id
        self.name = document.name

    def read_rows(self) -> list[list[Any]]:
        rows = safe_query(
            self.session,
            lambda s: s.execute(
                select(DocumentRow)
                .where(DocumentRow.document_id == self.address)
                .order_by(DocumentRow.position)
            )
            .scalars()
            .all(),
            f"Failed to read rows of '{self.name}'",
        )
        return [list(row.cells or []) for row in rows]

    def append_row(self, values: list[Any]) -> None:
        next_position = safe_query(
            self.session,
            lambda s: s.execute(
                select(func.coalesce(func.max(DocumentRow.position) + 1, 0)).where(
                    DocumentRow.document_id == self.address
                )
            ).scalar_one(),
            f"Failed to find the end of '{self.name}'",
        )
        self.session.add(
            DocumentRow(document_id=self.address, position=next_position, cells=list(values))
        )
        self._touch()
        safe_commit(self.session, f"append row to {self.name}")

    def write_row(self, index: int, values: list[Any]) -> None:
        row = self._row_at(index)
        row.cells = list(values)
        self._touch()
        safe_commit(self.session, f"write row {index} of {self.name}")

    def delete_row(self, index: int) -> None:
        row = self._row_at(index)

        def shift_up(s: Session) -> None:
            s.delete(row)
            s.flush()
            s.execute(
                update(DocumentRow)
                .where(DocumentRow.document_id == self.address, DocumentRow.position > index)
                .values(position=DocumentRow.position - 1)
            )

        safe_query(self.session, shift_up, f"Failed to delete row {index} of '{self.name}'")
        self._touch()
        safe_commit(self.session, f"delete row {index} of {self.name}")

    def insert_row_at_top(self, values: list[Any]) -> None:
        safe_query(
            self.session,
            lambda s: s.execute(
                update(DocumentRow)
                .where(DocumentRow.document_id == self.address)
                .values(position=DocumentRow.position + 1)
            ),
            f"Failed to make room at the top of '{self.name}'",
        )
        self.session.add(DocumentRow(document_id=self.address, position=0, cells=list(values)))
        self._touch()
        safe_commit(self.session, f"insert header into {self.name}")

    def _row_at(self, index: int) -> DocumentRow:
        row = safe_query(
            self.session,
            lambda s: s.execute(
                select(DocumentRow).where(
                    DocumentRow.document_id == self.address, DocumentRow.position == index
                )
            ).scalar_one_or_none(),
            f"Failed to locate row {index} of '{self.name}'",
        )
        if row is None:
            raise ResourceUnavailableError(f"Row {index} no longer exists in '{self.name}'")
        return row

    def _touch(self) -> None:
        self._document.modified_at = datetime.now()


class SqlDocumentCatalog(DocumentCatalog):
    """Catalog over the ``documents`` table."""

    def __init__(self, session: Session):
        self.session = session

    def search(self, name_contains: str, include_trashed: bool = False) -> list[CatalogEntry]:
        query = select(Document).where(Document.name.contains(name_contains, autoescape=True))
        if not include_trashed:
            query = query.where(Document.trashed.is_(False))

        documents = safe_query(
            self.session,
            lambda s: s.execute(query).scalars().all(),
            f"Failed to search catalog for '{name_contains}'",
        )
        return [self._to_entry(doc) for doc in documents]

    def open(self, address: str) -> SqlDocument:
        document = self._get(address)
        if document.trashed:
            raise ResourceUnavailableError(f"Document {address} is in the trash")
        return SqlDocument(self.session, document)

    def sharing(self, address: str) -> SharingInfo:
        document = self._get(address)
        return SharingInfo(
            owner=document.owner,
            editors=document.editor_list,
            viewers=document.viewer_list,
        )

    def create_document(
        self,
        name: str,
        rows: list[list[Any]] | None = None,
        owner: str | None = None,
        modified_at: datetime | None = None,
    ) -> CatalogEntry:
        """Create a document, optionally pre-filled with rows (header first)."""
        now = datetime.now()
        document = Document(
            id=uuid4().hex,
            name=name,
            owner=owner,
            created_at=now,
            modified_at=modified_at or now,
        )
        for position, cells in enumerate(rows or []):
            document.rows.append(DocumentRow(position=position, cells=list(cells)))

        self.session.add(document)
        safe_commit(self.session, f"create document {name}")
        logger.info("Created document '%s' (%s)", name, document.id)
        return self._to_entry(document)

    def trash(self, address: str) -> None:
        document = self._get(address)
        document.trashed = True
        safe_commit(self.session, f"trash document {address}")

    def share(self, address: str, identity: str, role: str = "viewer") -> SharingInfo:
        """Grant ``identity`` viewer or editor rights on a document."""
        if role not in ("viewer", "editor"):
            raise ValueError(f"Unknown sharing role: {role}")

        document = self._get(address)
        if role == "editor":
            document.editors = json.dumps(sorted({*document.editor_list, identity}))
        else:
            document.viewers = json.dumps(sorted({*document.viewer_list, identity}))
        safe_commit(self.session, f"share document {address}")
        return self.sharing(address)

    def _get(self, address: str) -> Document:
        document = safe_query(
            self.session,
            lambda s: s.get(Document, address),
            f"Failed to open document {address}",
        )
        if document is None:
            raise ResourceUnavailableError(f"Document {address} does not exist")
        return document

    @staticmethod
    def _to_entry(document: Document) -> CatalogEntry:
        return CatalogEntry(
            address=document.id,
            name=document.name,
            modified_at=document.modified_at,
            trashed=bool(document.trashed),
        )
