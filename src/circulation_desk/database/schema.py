"""
SQLAlchemy schema for the Circulation Desk.

The desk does not map records onto typed columns. Each entity lives in a
*document*: a named, flat table whose rows are addressed by position and
whose cells are stored as a JSON list. Documents are found by name through
the catalog, so several candidates ("Items", "Items-v2") may coexist.

Tables:
1. documents      - the catalog: name, owner, sharing, trash flag, timestamps
2. document_rows  - one row per table line, ordered by ``position`` (0 = header)
3. settings       - durable key/value configuration (resolved addresses etc.)
"""

import json
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship

# Base class for all SQLAlchemy models
Base = declarative_base()


class Document(Base):
    """
    Documents table - one entry per tabular document in the catalog.

    ``modified_at`` is bumped on every row write; discovery uses it to pick
    the most recently used candidate.
    """

    __tablename__ = "documents"

    id = Column(String(64), primary_key=True)
    name = Column(String(500), nullable=False, index=True)
    owner = Column(String(320), nullable=True)
    # JSON list of identities (emails) the document is shared with
    editors = Column(Text, nullable=False, default="[]")
    viewers = Column(Text, nullable=False, default="[]")
    trashed = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, nullable=False, default=datetime.now)
    modified_at = Column(DateTime, nullable=False, default=datetime.now)

    rows = relationship(
        "DocumentRow",
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="DocumentRow.position",
    )

    __table_args__ = (Index("idx_document_name_trashed", "name", "trashed"),)

    @property
    def editor_list(self) -> list[str]:
        return json.loads(self.editors or "[]")

    @property
    def viewer_list(self) -> list[str]:
        return json.loads(self.viewers or "[]")

    def __repr__(self) -> str:
        return f"<Document(id='{self.id}', name='{self.name}', trashed={self.trashed})>"


class DocumentRow(Base):
    """
    One line of a document.

    Positions are contiguous from 0; deleting a row shifts every later row
    up by one and inserting at the top shifts every row down.
    """

    __tablename__ = "document_rows"

    id = Column(Integer, primary_key=True, autoincrement=True)
    document_id = Column(String(64), ForeignKey("documents.id"), nullable=False)
    position = Column(Integer, nullable=False)
    cells = Column(JSON, nullable=False, default=list)

    document = relationship("Document", back_populates="rows")

    __table_args__ = (Index("idx_row_document_position", "document_id", "position"),)

    def __repr__(self) -> str:
        return f"<DocumentRow(document='{self.document_id}', position={self.position})>"


class Setting(Base):
    """Settings table - durable key/value pairs."""

    __tablename__ = "settings"

    key = Column(String(200), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    def __repr__(self) -> str:
        return f"<Setting(key='{self.key}')>"
