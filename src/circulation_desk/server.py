"""Circulation Desk MCP Server.

Exposes the circulation services as MCP tools over stdio. The server holds no
state of its own: every tool call opens a database session, builds a
``Library`` on it and closes it again. Document addresses found by discovery
live in the settings table, so they survive restarts.
"""

import logging
import signal
import sys
from typing import Any

from fastmcp import FastMCP

from circulation_desk.config import get_config
from circulation_desk.database.session import get_db_manager
from circulation_desk.tools import all_tools

# stdout carries the stdio transport; logs go to stderr
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)

logger = logging.getLogger(__name__)

config = get_config()

mcp = FastMCP(
    name=config.server_name,
    version=config.server_version,
    instructions=(
        "Circulation Desk - lending of books and other media to library members. "
        "Run discover_documents once before anything else. Members must be active "
        "and items available to check out; use return_item, extend_loan and "
        "update_overdue_statuses to manage loans afterwards."
    ),
)

for tool in all_tools:
    logger.debug("Registering tool: %s", tool["name"])
    try:
        mcp.tool(
            name=tool["name"],
            description=tool["description"],
        )(tool["handler"])
    except Exception:
        logger.exception("Failed to register tool %s", tool["name"])
        raise

logger.info("Registered %d tools", len(all_tools))


def init_storage() -> None:
    """Create the document and settings tables if they do not exist yet."""
    db_manager = get_db_manager()
    db_manager.init_database()
    if not db_manager.verify_connection():
        raise RuntimeError(f"Cannot connect to database at {db_manager.database_url}")


def run_stdio_server() -> None:
    """Run the MCP server using stdio transport."""
    logger.info("Starting %s v%s on stdio transport", config.server_name, config.server_version)

    if config.is_development:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Debug mode enabled")
    else:
        logging.getLogger().setLevel(config.log_level)
        logging.getLogger("fastmcp").setLevel(logging.WARNING)

    def signal_handler(signum: int, _frame: Any) -> None:
        logger.info("Received signal %s, shutting down", signum)
        get_db_manager().close()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        mcp.run(transport="stdio")
    except Exception:
        logger.exception("Fatal error in MCP server")
        sys.exit(1)
    finally:
        get_db_manager().close()


def main() -> None:
    """Entry point for the ``circulation-desk`` command."""
    try:
        logger.info("Circulation Desk %s (transport: %s)", config.server_version, config.transport)
        init_storage()

        if config.transport == "stdio":
            run_stdio_server()
        else:
            logger.error("Unsupported transport: %s", config.transport)
            sys.exit(1)

    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception:
        logger.exception("Failed to start MCP server")
        sys.exit(1)


if __name__ == "__main__":
    main()
