"""
MCP tools for the Circulation Desk.

Each tool is a dictionary with ``name``, ``description``, ``inputSchema``
and an async ``handler`` taking the raw arguments. Handlers return the
``OperationResult`` payload shape and never raise.

- setup: discovery, configuration, document creation, access control
- members: member registration and status changes
- items: catalogue maintenance
- circulation: checkout, return, extension, loss, overdue tracking
"""

from .circulation import (
    checkout_item,
    current_loan_for_item,
    extend_loan,
    list_active_loans,
    list_overdue_loans,
    mark_loan_lost,
    member_loans,
    return_item,
    update_overdue_statuses,
)
from .items import (
    check_item_availability,
    create_item,
    delete_item,
    get_item,
    list_items,
    search_items,
    update_item,
    update_item_status,
)
from .members import (
    check_member_standing,
    create_member,
    deactivate_member,
    delete_member,
    get_member,
    list_members,
    reactivate_member,
    search_members,
    suspend_member,
    update_member,
)
from .setup import (
    check_access_tool,
    clear_configuration,
    create_document,
    discover_documents,
    initialize_headers,
    set_access_control,
    show_configuration,
)

setup_tools = [
    discover_documents,
    show_configuration,
    clear_configuration,
    initialize_headers,
    create_document,
    check_access_tool,
    set_access_control,
]

member_tools = [
    create_member,
    update_member,
    get_member,
    list_members,
    search_members,
    suspend_member,
    reactivate_member,
    deactivate_member,
    delete_member,
    check_member_standing,
]

item_tools = [
    create_item,
    update_item,
    get_item,
    list_items,
    search_items,
    update_item_status,
    delete_item,
    check_item_availability,
]

circulation_tools = [
    checkout_item,
    return_item,
    extend_loan,
    mark_loan_lost,
    update_overdue_statuses,
    list_active_loans,
    list_overdue_loans,
    member_loans,
    current_loan_for_item,
]

# Registered by the server in this order
all_tools = [*setup_tools, *member_tools, *item_tools, *circulation_tools]

__all__ = [
    "all_tools",
    "circulation_tools",
    "item_tools",
    "member_tools",
    "setup_tools",
]
