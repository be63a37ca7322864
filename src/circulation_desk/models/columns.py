"""
Column-order definitions for every entity document.

Each document is a single flat table: row 0 holds the column names below, in
this order, and column 0 of every data row is the record id. The order is
part of the external document format and must not be rearranged.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class ResourceKind(str, Enum):
    """The closed set of document kinds the desk knows how to locate."""

    MEMBERS = "members"
    ITEMS = "items"
    LOANS = "loans"


class EntitySchema(BaseModel):
    """Ordered column list attached to one kind of document."""

    kind: ResourceKind
    label: str
    columns: tuple[str, ...]

    model_config = ConfigDict(frozen=True)

    @property
    def width(self) -> int:
        return len(self.columns)

    @property
    def header(self) -> list[str]:
        return list(self.columns)


MEMBER_SCHEMA = EntitySchema(
    kind=ResourceKind.MEMBERS,
    label="Member",
    columns=("id", "name", "email", "phone", "status", "joinDate", "notes"),
)

ITEM_SCHEMA = EntitySchema(
    kind=ResourceKind.ITEMS,
    label="Item",
    columns=("id", "title", "author", "type", "externalCode", "status", "notes"),
)

LOAN_SCHEMA = EntitySchema(
    kind=ResourceKind.LOANS,
    label="Loan",
    columns=("id", "memberId", "itemId", "checkoutDate", "dueDate", "returnDate", "status"),
)

SCHEMAS: dict[ResourceKind, EntitySchema] = {
    ResourceKind.MEMBERS: MEMBER_SCHEMA,
    ResourceKind.ITEMS: ITEM_SCHEMA,
    ResourceKind.LOANS: LOAN_SCHEMA,
}


def schema_for(kind: ResourceKind | str) -> EntitySchema:
    """Look up the schema for a resource kind."""
    return SCHEMAS[ResourceKind(kind)]
