"""
Circulation Desk.

Lending of books and other media to library members, with members, items and
loans kept in name-discovered tabular documents.

Key Components:
- models: record models, column schemas and the operation result type
- database: documents, catalog, settings and the generic record store
- services: member, item and loan rules
- library: wiring of the locator and services over one session
- tools: MCP tools exposed by the server
"""

__version__ = "0.1.0"

from .library import Library, library_scope
from .models.result import ErrorCode, OperationResult

__all__ = [
    "ErrorCode",
    "Library",
    "OperationResult",
    "__version__",
    "library_scope",
]
