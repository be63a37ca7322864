"""
Item service.

Specialises the record store for circulating items. New items start
``available``; the status helpers (``mark_on_loan``, ``mark_available``,
``mark_lost``) are what the loan service calls when a loan changes state.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from ..database.locator import ResourceLocator
from ..database.record_store import RecordStore, generate_id
from ..models.columns import ITEM_SCHEMA
from ..models.item import Item, ItemStatus, ItemType
from ..models.result import ErrorCode, OperationResult
from ..validation import VALID_ITEM_STATUSES, VALID_ITEM_TYPES, validate_item

logger = logging.getLogger(__name__)


def _invalid(field: str, value: str) -> OperationResult:
    message = f"Invalid {field}: {value}"
    return OperationResult.fail(ErrorCode.VALIDATION_FAILED, message, [message])


class ItemService(RecordStore[Item]):
    """Data access and rules for library items."""

    def __init__(self, locator: ResourceLocator, id_factory: Callable[[], str] = generate_id):
        super().__init__(locator, ITEM_SCHEMA, Item, id_factory)

    def create_item(
        self,
        title: str,
        author: str,
        type: ItemType | str = ItemType.BOOK,
        external_code: str = "",
        notes: str = "",
    ) -> OperationResult[Item]:
        """Add a new item to the catalogue with status ``available``."""
        fields = {
            "title": title,
            "author": author,
            "type": type.value if isinstance(type, ItemType) else type,
            "external_code": external_code,
            "status": ItemStatus.AVAILABLE.value,
            "notes": notes,
        }

        validation = validate_item(fields)
        if not validation.valid:
            return OperationResult.fail(
                ErrorCode.VALIDATION_FAILED,
                f"Invalid item: {'; '.join(validation.errors)}",
                validation.errors,
            )

        return self.create(fields)

    def update_item(self, id: str, changes: Mapping[str, Any]) -> OperationResult[Item]:
        """Apply edits after validating the merged item."""
        current = self.get_by_id(id)
        if not current.success:
            return current

        try:
            values = self._normalize(changes)
        except KeyError as e:
            return OperationResult.fail(ErrorCode.VALIDATION_FAILED, f"Unknown field: {e.args[0]}")

        validation = validate_item({**current.data.model_dump(), **values})
        if not validation.valid:
            return OperationResult.fail(
                ErrorCode.VALIDATION_FAILED,
                f"Invalid item: {'; '.join(validation.errors)}",
                validation.errors,
            )

        return self.update(id, values)

    def get_by_status(self, status: ItemStatus | str) -> OperationResult[list[Item]]:
        wanted = status.value if isinstance(status, ItemStatus) else status
        if wanted not in VALID_ITEM_STATUSES:
            return _invalid("status", wanted)
        return self.find_all(lambda i: i.status == wanted)

    def get_available_items(self) -> OperationResult[list[Item]]:
        return self.get_by_status(ItemStatus.AVAILABLE)

    def get_on_loan_items(self) -> OperationResult[list[Item]]:
        return self.get_by_status(ItemStatus.ON_LOAN)

    def get_by_type(self, type: ItemType | str) -> OperationResult[list[Item]]:
        wanted = type.value if isinstance(type, ItemType) else type
        if wanted not in VALID_ITEM_TYPES:
            return _invalid("type", wanted)
        return self.find_all(lambda i: i.type == wanted)

    def search_items(self, query: str) -> OperationResult[list[Item]]:
        """Case-insensitive substring search over title, author and external code."""
        needle = query.lower()
        return self.find_all(
            lambda i: needle in i.title.lower()
            or needle in i.author.lower()
            or needle in i.external_code.lower()
        )

    def update_status(self, id: str, status: ItemStatus | str) -> OperationResult[Item]:
        value = status.value if isinstance(status, ItemStatus) else status
        if value not in VALID_ITEM_STATUSES:
            return _invalid("status", value)
        logger.debug("Item %s -> %s", id, value)
        return self.update(id, {"status": value})

    def mark_on_loan(self, id: str) -> OperationResult[Item]:
        return self.update_status(id, ItemStatus.ON_LOAN)

    def mark_available(self, id: str) -> OperationResult[Item]:
        return self.update_status(id, ItemStatus.AVAILABLE)

    def mark_lost(self, id: str) -> OperationResult[Item]:
        return self.update_status(id, ItemStatus.LOST)

    def is_available(self, id: str) -> OperationResult[bool]:
        """True when the item exists and is available for checkout."""
        result = self.get_by_id(id)
        if not result.success:
            return OperationResult.propagate(result)
        return OperationResult.ok(result.data.is_available)
