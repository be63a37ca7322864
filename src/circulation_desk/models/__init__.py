"""
Circulation Desk models.

Pydantic models for the three record types, the column-order registry that
maps them onto document rows, and the result type every operation returns:

- Member: people who borrow
- Item: circulating media
- Loan: checkout transactions linking the two
"""

from .columns import (
    ITEM_SCHEMA,
    LOAN_SCHEMA,
    MEMBER_SCHEMA,
    SCHEMAS,
    EntitySchema,
    ResourceKind,
    schema_for,
)
from .item import Item, ItemStatus, ItemType
from .loan import Loan, LoanStatus
from .member import Member, MemberStatus
from .record import Record
from .result import (
    CirculationDeskError,
    ErrorCode,
    NotFoundError,
    OperationError,
    OperationResult,
    PreconditionFailedError,
    ResourceUnavailableError,
    ValidationFailedError,
)

__all__ = [
    "ITEM_SCHEMA",
    "LOAN_SCHEMA",
    "MEMBER_SCHEMA",
    "SCHEMAS",
    "CirculationDeskError",
    "EntitySchema",
    "ErrorCode",
    "Item",
    "ItemStatus",
    "ItemType",
    "Loan",
    "LoanStatus",
    "Member",
    "MemberStatus",
    "NotFoundError",
    "OperationError",
    "OperationResult",
    "PreconditionFailedError",
    "Record",
    "ResourceKind",
    "ResourceUnavailableError",
    "ValidationFailedError",
    "schema_for",
]
