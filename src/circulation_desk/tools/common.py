"""
Payload helpers shared by the tool handlers.

Every tool returns the same shape: ``{"success": bool, "data"?, "error"?,
"code"?, "errors"?, "warning"?}``. Handlers never raise; bad input and
unexpected failures become error payloads.
"""

import logging
from typing import Any

from pydantic import ValidationError

from ..models.result import ErrorCode

logger = logging.getLogger(__name__)


def invalid_input(tool_name: str, exc: ValidationError) -> dict[str, Any]:
    """Payload for arguments that failed the tool's input schema."""
    logger.warning("Invalid %s parameters: %s", tool_name, exc)
    errors = [
        f"{'.'.join(str(part) for part in err['loc']) or 'input'}: {err['msg']}"
        for err in exc.errors()
    ]
    return {
        "success": False,
        "code": ErrorCode.VALIDATION_FAILED.value,
        "error": f"Invalid {tool_name} parameters: {'; '.join(errors)}",
        "errors": errors,
    }


def unexpected_error(tool_name: str, exc: Exception) -> dict[str, Any]:
    """
    Payload for a failure nothing below the tool handled.

    Must be called from inside the ``except`` block so the traceback is logged.
    """
    logger.exception("Unexpected error in %s tool", tool_name)
    return {"success": False, "error": f"An unexpected error occurred: {exc!s}"}
