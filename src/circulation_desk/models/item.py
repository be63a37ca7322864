"""
Item model for the Circulation Desk.

Items are the circulating media: books, DVDs, magazines, audiobooks and
anything else with a shelf code. An item's status is changed by the loan
workflow (``available`` <-> ``on-loan``, ``lost``) and by staff corrections
(``damaged``, ``retired``).
"""

from enum import Enum

from pydantic import Field

from .record import Record


class ItemType(str, Enum):
    """Kinds of media the library circulates."""

    BOOK = "book"
    DVD = "dvd"
    MAGAZINE = "magazine"
    AUDIOBOOK = "audiobook"
    OTHER = "other"


class ItemStatus(str, Enum):
    """Circulation status of an item."""

    AVAILABLE = "available"
    ON_LOAN = "on-loan"
    LOST = "lost"
    DAMAGED = "damaged"
    RETIRED = "retired"


class Item(Record):
    """
    Represents a circulating item.

    Rows are stored in the order ``id, title, author, type, externalCode,
    status, notes``.
    """

    title: str = Field(
        default="",
        description="Title of the item",
        examples=["The Great Gatsby"],
    )

    author: str = Field(
        default="",
        description="Author, director or other creator",
        examples=["F. Scott Fitzgerald"],
    )

    type: str = Field(
        default=ItemType.BOOK.value,
        description="Media type: book, dvd, magazine, audiobook or other",
    )

    external_code: str = Field(
        default="",
        description="ISBN, barcode or other external identifier",
        examples=["9780743273565"],
    )

    status: str = Field(
        default=ItemStatus.AVAILABLE.value,
        description="Circulation status",
    )

    notes: str = Field(
        default="",
        description="Free-form notes",
    )

    @property
    def is_available(self) -> bool:
        return self.status == ItemStatus.AVAILABLE.value
