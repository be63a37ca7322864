"""
Item tools.

Catalogue maintenance over the items document. Status changes made here are
manual corrections (damaged, retired, found again); the loan tools keep
``on-loan`` and ``available`` in step with checkouts and returns.
"""

import logging
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from ..library import library_scope
from ..models.item import ItemStatus, ItemType
from .common import invalid_input, unexpected_error

logger = logging.getLogger(__name__)


class CreateItemInput(BaseModel):
    """Input schema for the create_item tool."""

    title: str = Field(..., description="Title of the item", examples=["Dune"])
    author: str = Field(..., description="Author, director or publisher", examples=["Frank Herbert"])
    type: ItemType = Field(default=ItemType.BOOK, description="Kind of media")
    external_code: str = Field(
        default="",
        description="External identifier such as an ISBN or barcode",
        examples=["9780441013593"],
    )
    notes: str = Field(default="", max_length=1000)


class ItemIdInput(BaseModel):
    item_id: str = Field(..., description="ID of the item", min_length=1)


class UpdateItemInput(ItemIdInput):
    """Only the fields given are changed; the merged item is validated."""

    title: str | None = None
    author: str | None = None
    type: ItemType | None = None
    external_code: str | None = None
    notes: str | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude={"item_id"}, exclude_none=True)


class ItemStatusInput(ItemIdInput):
    status: ItemStatus = Field(..., description="New status of the item")


class ListItemsInput(BaseModel):
    status: ItemStatus | None = Field(default=None, description="Only items with this status")
    type: ItemType | None = Field(default=None, description="Only items of this type")


class SearchItemsInput(BaseModel):
    query: str = Field(
        ...,
        description="Case-insensitive text matched against title, author and external code",
        min_length=1,
    )


async def create_item_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handler for the create_item tool. New items are available."""
    try:
        params = CreateItemInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("create_item", e)

    try:
        with library_scope() as library:
            result = library.items.create_item(
                params.title,
                params.author,
                type=params.type,
                external_code=params.external_code,
                notes=params.notes,
            )
        return result.to_payload()
    except Exception as e:
        return unexpected_error("create_item", e)


async def update_item_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    try:
        params = UpdateItemInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("update_item", e)

    try:
        with library_scope() as library:
            result = library.items.update_item(params.item_id, params.changes())
        return result.to_payload()
    except Exception as e:
        return unexpected_error("update_item", e)


async def get_item_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    try:
        params = ItemIdInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("get_item", e)

    try:
        with library_scope() as library:
            result = library.items.get_by_id(params.item_id)
        return result.to_payload()
    except Exception as e:
        return unexpected_error("get_item", e)


async def list_items_handler(arguments: dict[str, Any] | None = None) -> dict[str, Any]:
    """Handler for the list_items tool; status and type filters combine."""
    try:
        params = ListItemsInput.model_validate(arguments or {})
    except ValidationError as e:
        return invalid_input("list_items", e)

    status = params.status.value if params.status else None
    type_ = params.type.value if params.type else None

    try:
        with library_scope() as library:
            result = library.items.find_all(
                lambda i: (status is None or i.status == status)
                and (type_ is None or i.type == type_)
            )
        return result.to_payload()
    except Exception as e:
        return unexpected_error("list_items", e)


async def search_items_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    try:
        params = SearchItemsInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("search_items", e)

    try:
        with library_scope() as library:
            result = library.items.search_items(params.query)
        return result.to_payload()
    except Exception as e:
        return unexpected_error("search_items", e)


async def update_item_status_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """
    Handler for the update_item_status tool.

    Setting an item ``on-loan`` or ``available`` by hand does not create or
    close a loan; it is meant for repairing a status after a failed update.
    """
    try:
        params = ItemStatusInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("update_item_status", e)

    try:
        with library_scope() as library:
            result = library.items.update_status(params.item_id, params.status)
        return result.to_payload()
    except Exception as e:
        return unexpected_error("update_item_status", e)


async def delete_item_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """
    Handler for the delete_item tool.

    The row is removed outright. Loans that reference the item keep its ID;
    prefer ``update_item_status`` with ``retired`` for items that circulated.
    """
    try:
        params = ItemIdInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("delete_item", e)

    try:
        with library_scope() as library:
            result = library.items.delete(params.item_id)
        return result.to_payload()
    except Exception as e:
        return unexpected_error("delete_item", e)


async def check_item_availability_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    try:
        params = ItemIdInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("check_item_availability", e)

    try:
        with library_scope() as library:
            result = library.items.is_available(params.item_id)
        return result.to_payload()
    except Exception as e:
        return unexpected_error("check_item_availability", e)


# =============================================================================
# TOOL REGISTRATION
# =============================================================================

create_item = {
    "name": "create_item",
    "description": "Add an item (book, dvd, magazine, audiobook or other) to the catalogue.",
    "inputSchema": CreateItemInput.model_json_schema(),
    "handler": create_item_handler,
}

update_item = {
    "name": "update_item",
    "description": "Change an item's title, author, type, external code or notes.",
    "inputSchema": UpdateItemInput.model_json_schema(),
    "handler": update_item_handler,
}

get_item = {
    "name": "get_item",
    "description": "Look up an item by ID.",
    "inputSchema": ItemIdInput.model_json_schema(),
    "handler": get_item_handler,
}

list_items = {
    "name": "list_items",
    "description": "List items, optionally filtered by status and type.",
    "inputSchema": ListItemsInput.model_json_schema(),
    "handler": list_items_handler,
}

search_items = {
    "name": "search_items",
    "description": "Find items whose title, author or external code contains the query.",
    "inputSchema": SearchItemsInput.model_json_schema(),
    "handler": search_items_handler,
}

update_item_status = {
    "name": "update_item_status",
    "description": (
        "Set an item's status by hand (available, on-loan, lost, damaged, retired). "
        "Use checkout_item and return_item for normal circulation."
    ),
    "inputSchema": ItemStatusInput.model_json_schema(),
    "handler": update_item_status_handler,
}

delete_item = {
    "name": "delete_item",
    "description": "Remove an item from the catalogue. Retire items that have loan history instead.",
    "inputSchema": ItemIdInput.model_json_schema(),
    "handler": delete_item_handler,
}

check_item_availability = {
    "name": "check_item_availability",
    "description": "Report whether an item can be checked out right now.",
    "inputSchema": ItemIdInput.model_json_schema(),
    "handler": check_item_availability_handler,
}
