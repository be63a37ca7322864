"""
Setup tools: discovery, configuration and access control.

Before any member, item or loan tool can work, discovery has to find the
three documents by name and store their addresses. The usual first run is:

1. ``create_document`` for each kind (skip if the documents already exist)
2. ``discover_documents``
3. ``initialize_headers`` to repair or write the header rows

Re-run ``discover_documents`` whenever a document is replaced, renamed or
moved to the trash; stored addresses are never re-checked on their own.
"""

import logging
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from ..access import check_access, set_access_control_address
from ..library import library_scope
from ..models.columns import ResourceKind, schema_for
from ..models.result import OperationResult, ResourceUnavailableError
from .common import invalid_input, unexpected_error

logger = logging.getLogger(__name__)


class DiscoverDocumentsInput(BaseModel):
    kinds: list[ResourceKind] | None = Field(
        default=None,
        description="Kinds to resolve (members, items, loans). All kinds if omitted",
    )


class CreateDocumentInput(BaseModel):
    """Input schema for the create_document tool."""

    kind: ResourceKind = Field(..., description="Which kind of records the document holds")
    name: str | None = Field(
        default=None,
        description="Document name. Defaults to the kind's prefix; must start with it to be discoverable",
        max_length=500,
    )
    owner: str | None = Field(default=None, description="Identity that owns the document")


class CheckAccessInput(BaseModel):
    identity: str = Field(default="", description="Email or user name of the caller")


class SetAccessControlInput(BaseModel):
    address: str = Field(..., description="Address of the access-control document", min_length=1)


async def discover_documents_handler(arguments: dict[str, Any] | None = None) -> dict[str, Any]:
    """
    Handler for the discover_documents tool.

    For each kind, the most recently modified document whose name starts with
    the kind's prefix wins. Partial discovery succeeds with a warning naming
    what is missing; finding nothing at all is an error.
    """
    try:
        params = DiscoverDocumentsInput.model_validate(arguments or {})
    except ValidationError as e:
        return invalid_input("discover_documents", e)

    try:
        with library_scope() as library:
            result = library.locator.locate_all(params.kinds)
        return result.to_payload()
    except Exception as e:
        return unexpected_error("discover_documents", e)


async def show_configuration_handler(arguments: dict[str, Any] | None = None) -> dict[str, Any]:  # noqa: ARG001
    try:
        with library_scope() as library:
            config = library.locator.current_config()
        if config is None:
            return OperationResult.ok(
                warning="No documents configured. Run discover_documents first."
            ).to_payload()
        return OperationResult.ok(config).to_payload()
    except Exception as e:
        return unexpected_error("show_configuration", e)


async def clear_configuration_handler(arguments: dict[str, Any] | None = None) -> dict[str, Any]:  # noqa: ARG001
    try:
        with library_scope() as library:
            library.locator.clear()
        return OperationResult.ok().to_payload()
    except ResourceUnavailableError as e:
        return OperationResult.from_exception(e).to_payload()
    except Exception as e:
        return unexpected_error("clear_configuration", e)


async def initialize_headers_handler(arguments: dict[str, Any] | None = None) -> dict[str, Any]:  # noqa: ARG001
    """Handler for the initialize_headers tool; ``data`` lists the kinds checked."""
    try:
        with library_scope() as library:
            result = library.initialize_headers()
        return result.to_payload()
    except Exception as e:
        return unexpected_error("initialize_headers", e)


async def create_document_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handler for the create_document tool. The new document holds only its header row."""
    try:
        params = CreateDocumentInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("create_document", e)

    try:
        with library_scope() as library:
            prefix = library.locator.prefix_for(params.kind)
            name = params.name or prefix
            entry = library.catalog.create_document(
                name, rows=[schema_for(params.kind).header], owner=params.owner
            )

        warning = None
        if not name.startswith(prefix):
            warning = f'"{name}" does not start with "{prefix}" and will not be found by discovery'
        return OperationResult.ok(entry, warning=warning).to_payload()
    except ResourceUnavailableError as e:
        return OperationResult.from_exception(e).to_payload()
    except Exception as e:
        return unexpected_error("create_document", e)


async def check_access_handler(arguments: dict[str, Any] | None = None) -> dict[str, Any]:
    """
    Handler for the check_access tool.

    Anyone the access-control document is shared with is authorized. The
    check itself always succeeds; ``data.authorized`` carries the answer.
    """
    try:
        params = CheckAccessInput.model_validate(arguments or {})
    except ValidationError as e:
        return invalid_input("check_access", e)

    try:
        with library_scope() as library:
            decision = check_access(params.identity, library.catalog, library.settings)
        return OperationResult.ok(decision).to_payload()
    except Exception as e:
        return unexpected_error("check_access", e)


async def set_access_control_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    try:
        params = SetAccessControlInput.model_validate(arguments)
    except ValidationError as e:
        return invalid_input("set_access_control", e)

    try:
        with library_scope() as library:
            sharing = library.catalog.sharing(params.address)
            set_access_control_address(library.settings, params.address)
        return OperationResult.ok(sharing).to_payload()
    except ResourceUnavailableError as e:
        return OperationResult.from_exception(e).to_payload()
    except Exception as e:
        return unexpected_error("set_access_control", e)


# =============================================================================
# TOOL REGISTRATION
# =============================================================================

discover_documents = {
    "name": "discover_documents",
    "description": (
        "Find the members, items and loans documents by name and remember their addresses. "
        "Run this first, and again after replacing or renaming a document."
    ),
    "inputSchema": DiscoverDocumentsInput.model_json_schema(),
    "handler": discover_documents_handler,
}

show_configuration = {
    "name": "show_configuration",
    "description": "Show the stored document addresses and when discovery last ran.",
    "inputSchema": {"type": "object", "properties": {}},
    "handler": show_configuration_handler,
}

clear_configuration = {
    "name": "clear_configuration",
    "description": "Forget every stored document address. Discovery must be run again afterwards.",
    "inputSchema": {"type": "object", "properties": {}},
    "handler": clear_configuration_handler,
}

initialize_headers = {
    "name": "initialize_headers",
    "description": (
        "Make sure each configured document starts with the expected header row. "
        "Existing rows are never overwritten."
    ),
    "inputSchema": {"type": "object", "properties": {}},
    "handler": initialize_headers_handler,
}

create_document = {
    "name": "create_document",
    "description": "Create an empty members, items or loans document with its header row.",
    "inputSchema": CreateDocumentInput.model_json_schema(),
    "handler": create_document_handler,
}

check_access_tool = {
    "name": "check_access",
    "description": "Check whether an identity may use the desk, based on the access-control document.",
    "inputSchema": CheckAccessInput.model_json_schema(),
    "handler": check_access_handler,
}

set_access_control = {
    "name": "set_access_control",
    "description": "Designate the document whose sharing list decides who may use the desk.",
    "inputSchema": SetAccessControlInput.model_json_schema(),
    "handler": set_access_control_handler,
}
