"""Configuration management for the Circulation Desk.

Settings come from the environment (``CIRCULATION_DESK_`` prefix) or a local
``.env`` file:
1. Server metadata for the MCP handshake
2. Database location for the document and settings tables
3. Circulation policy (default loan period)
4. Canonical document name prefixes used by discovery
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DeskConfig(BaseSettings):
    """Circulation Desk configuration.

    Document prefixes are matched case-sensitively against the start of a
    document name during discovery, so ``Items`` matches ``Items-v2`` but not
    ``Old Items``.
    """

    model_config = SettingsConfigDict(
        # Use CIRCULATION_DESK_ prefix for all env vars
        env_prefix="CIRCULATION_DESK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
    )

    # === Server Metadata ===

    server_name: str = Field(
        default="circulation-desk",
        description="MCP server name used in protocol handshake",
        pattern=r"^[a-z0-9-]+$",
    )

    server_version: str = Field(
        default="0.1.0",
        description="Server version for capability negotiation",
        pattern=r"^\d+\.\d+\.\d+(-[a-zA-Z0-9.]+)?$",
    )

    transport: str = Field(
        default="stdio",
        description="Primary transport mechanism",
        pattern=r"^stdio$",
    )

    # === Database Configuration ===

    database_path: Path = Field(
        default=Path("data/circulation.db"),
        description="SQLite file holding documents and settings",
    )

    # === Circulation Policy ===

    default_loan_days: int = Field(
        default=14,
        description="Loan period used when checkout or extend is called without one",
        ge=1,
        le=365,
    )

    # === Discovery ===

    members_prefix: str = Field(
        default="Members",
        description="Name prefix of the members document",
        min_length=1,
    )

    items_prefix: str = Field(
        default="Items",
        description="Name prefix of the items document",
        min_length=1,
    )

    loans_prefix: str = Field(
        default="Loans",
        description="Name prefix of the loans document",
        min_length=1,
    )

    # === Development Configuration ===

    debug: bool = Field(
        default=False,
        description="Enable debug logging",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR)$",
    )

    # === Validation Methods ===

    @field_validator("database_path")
    @classmethod
    def validate_database_path(cls, v: Path) -> Path:
        """Ensure the database directory exists."""
        abs_path = v.absolute()
        abs_path.parent.mkdir(parents=True, exist_ok=True)

        if not abs_path.parent.is_dir():
            raise ValueError(f"Database directory {abs_path.parent} is not accessible")

        return abs_path

    @field_validator("server_name")
    @classmethod
    def validate_server_name(cls, v: str) -> str:
        if len(v) < 3:
            raise ValueError("Server name must be at least 3 characters")
        if len(v) > 50:
            raise ValueError("Server name must not exceed 50 characters")
        return v

    @field_validator("members_prefix", "items_prefix", "loans_prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        """Prefixes are used inside catalog queries, so quotes are rejected."""
        if "'" in v or '"' in v:
            raise ValueError("Document prefixes must not contain quotes")
        return v

    # === Computed Properties ===

    @property
    def is_development(self) -> bool:
        return self.debug or self.log_level == "DEBUG"

    @property
    def server_info(self) -> dict[str, str]:
        """Get server information for the MCP handshake."""
        return {
            "name": self.server_name,
            "version": self.server_version,
            "transport": self.transport,
        }

    @property
    def document_prefixes(self) -> dict[str, str]:
        """Canonical document prefix keyed by resource kind value."""
        return {
            "members": self.members_prefix,
            "items": self.items_prefix,
            "loans": self.loans_prefix,
        }

    def get_database_url(self) -> str:
        """Get SQLAlchemy database URL."""
        return f"sqlite:///{self.database_path}"


# === Global Configuration Instance ===


class _ConfigStore:
    """Internal storage for configuration singleton."""

    _instance: DeskConfig | None = None


def get_config() -> DeskConfig:
    """Get or create the global configuration instance."""
    if _ConfigStore._instance is None:  # type: ignore[reportPrivateUsage]
        _ConfigStore._instance = DeskConfig()  # type: ignore[reportPrivateUsage]
    return _ConfigStore._instance  # type: ignore[reportPrivateUsage]


def reset_config() -> None:
    """Reset configuration (useful for testing)."""
    _ConfigStore._instance = None  # type: ignore[reportPrivateUsage]
