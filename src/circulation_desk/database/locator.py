"""
Name-based discovery of the backing documents.

Documents have no stable, well-known address. Each resource kind has a
canonical name prefix ("Members", "Items", "Loans"); discovery asks the
catalog for every document whose name *contains* the prefix, keeps only the
names that *start with* it, and picks the most recently modified one. The
winning address is written to the settings store, where every later
operation reads it.

Addresses are never re-validated. If a resolved document is later trashed or
deleted, opening it fails with ``ResourceUnavailableError`` until discovery
is run again. When two candidates share the exact same modification time the
winner is whichever the catalog listed first.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime

from pydantic import BaseModel, Field

from ..models.columns import ResourceKind
from ..models.result import ErrorCode, OperationResult, ResourceUnavailableError
from .documents import CatalogEntry, DocumentCatalog, TabularDocument
from .settings_store import SettingsStore

logger = logging.getLogger(__name__)

DEFAULT_PREFIXES: dict[ResourceKind, str] = {
    ResourceKind.MEMBERS: "Members",
    ResourceKind.ITEMS: "Items",
    ResourceKind.LOANS: "Loans",
}

ADDRESS_KEYS: dict[ResourceKind, str] = {
    ResourceKind.MEMBERS: "MEMBERS_DOCUMENT_ADDRESS",
    ResourceKind.ITEMS: "ITEMS_DOCUMENT_ADDRESS",
    ResourceKind.LOANS: "LOANS_DOCUMENT_ADDRESS",
}

LAST_DISCOVERY_KEY = "LAST_DISCOVERY_DATE"


class DiscoveredResource(BaseModel):
    """A document chosen for a resource kind."""

    kind: ResourceKind
    address: str
    name: str
    modified_at: datetime


class DiscoveryReport(BaseModel):
    """Outcome of resolving several kinds at once."""

    resolved: list[DiscoveredResource] = Field(default_factory=list)
    missing: list[ResourceKind] = Field(default_factory=list)


class LocatorConfig(BaseModel):
    """The addresses currently stored, for display."""

    addresses: dict[ResourceKind, str | None]
    last_discovery_date: str | None = None


class ResourceLocator:
    """
    Resolves resource kinds to document addresses.

    Args:
        catalog: Lists and opens candidate documents
        settings: Durable store for resolved addresses
        prefixes: Canonical name prefix per kind (defaults to the kind labels)
    """

    def __init__(
        self,
        catalog: DocumentCatalog,
        settings: SettingsStore,
        prefixes: Mapping[ResourceKind | str, str] | None = None,
    ):
        self.catalog = catalog
        self.settings = settings
        self.prefixes = dict(DEFAULT_PREFIXES)
        for kind, prefix in (prefixes or {}).items():
            self.prefixes[ResourceKind(kind)] = prefix

    def prefix_for(self, kind: ResourceKind | str) -> str:
        return self.prefixes[ResourceKind(kind)]

    def find_newest(self, kind: ResourceKind | str) -> DiscoveredResource | None:
        """
        Return the most recently modified document whose name starts with the
        kind's prefix, without storing anything.

        Raises:
            ResourceUnavailableError: If the catalog cannot be searched
        """
        kind = ResourceKind(kind)
        prefix = self.prefix_for(kind)

        newest: CatalogEntry | None = None
        for entry in self.catalog.search(prefix):
            if entry.trashed:
                continue
            # The catalog matches substrings; only true prefixes qualify
            if not entry.name.startswith(prefix):
                continue
            if newest is None or entry.modified_at > newest.modified_at:
                newest = entry

        if newest is None:
            return None

        return DiscoveredResource(
            kind=kind,
            address=newest.address,
            name=newest.name,
            modified_at=newest.modified_at,
        )

    def locate(self, kind: ResourceKind | str) -> OperationResult[DiscoveredResource]:
        """Resolve one kind and persist its address."""
        result = self._resolve(ResourceKind(kind))
        if result.success:
            self._mark_discovered()
        return result

    def locate_all(
        self, kinds: Iterable[ResourceKind | str] | None = None
    ) -> OperationResult[DiscoveryReport]:
        """
        Resolve every kind independently.

        Fails only when nothing resolved. When some kinds are missing the
        result is still a success, carrying a warning that names them.
        """
        report = DiscoveryReport()
        problems: list[str] = []
        first_failure: ErrorCode | None = None

        for kind in kinds or list(ResourceKind):
            kind = ResourceKind(kind)
            result = self._resolve(kind)
            if result.success:
                report.resolved.append(result.data)
            else:
                report.missing.append(kind)
                problems.append(result.error or f"Could not resolve {kind.value}")
                first_failure = first_failure or result.code

        if not report.resolved:
            return OperationResult.fail(
                first_failure or ErrorCode.NOT_FOUND,
                "No documents found. Create documents named "
                + ", ".join(f'"{self.prefix_for(k)}"' for k in report.missing)
                + f". Errors: {'; '.join(problems)}",
            )

        self._mark_discovered()

        if problems:
            return OperationResult.ok(report, warning=f"Partial discovery. Missing: {'; '.join(problems)}")
        return OperationResult.ok(report)

    def address_for(self, kind: ResourceKind | str) -> str | None:
        return self.settings.get(ADDRESS_KEYS[ResourceKind(kind)])

    def open(self, kind: ResourceKind | str) -> TabularDocument:
        """
        Open the document stored for a kind.

        Raises:
            ResourceUnavailableError: If discovery has not stored an address or
                the stored document can no longer be opened
        """
        kind = ResourceKind(kind)
        label = self.prefix_for(kind)
        address = self.address_for(kind)
        if not address:
            logger.info("No document address configured for %s", kind.value)
            raise ResourceUnavailableError(
                f"No {label} document configured. Run discovery first."
            )

        try:
            return self.catalog.open(address)
        except ResourceUnavailableError as e:
            logger.warning("Error opening %s document %s: %s", kind.value, address, e)
            raise ResourceUnavailableError(
                f"Could not access {label} document. Run discovery first."
            ) from e

    def current_config(self) -> LocatorConfig | None:
        """Return the stored addresses, or None when nothing was ever resolved."""
        addresses = {kind: self.address_for(kind) for kind in ResourceKind}
        if not any(addresses.values()):
            return None
        return LocatorConfig(
            addresses=addresses,
            last_discovery_date=self.settings.get(LAST_DISCOVERY_KEY),
        )

    def clear(self) -> None:
        """Forget every resolved address and the discovery timestamp."""
        for key in ADDRESS_KEYS.values():
            self.settings.delete(key)
        self.settings.delete(LAST_DISCOVERY_KEY)
        logger.info("Cleared stored document addresses")

    def _resolve(self, kind: ResourceKind) -> OperationResult[DiscoveredResource]:
        prefix = self.prefix_for(kind)
        try:
            found = self.find_newest(kind)
            if found is None:
                logger.warning('Could not find a document starting with "%s"', prefix)
                return OperationResult.fail(
                    ErrorCode.NOT_FOUND, f'Could not find a document starting with "{prefix}"'
                )
            self.settings.set(ADDRESS_KEYS[kind], found.address)
        except ResourceUnavailableError as e:
            logger.warning("Discovery of %s failed: %s", prefix, e)
            return OperationResult.from_exception(e)

        logger.info('Found %s: "%s" (%s)', kind.value, found.name, found.address)
        return OperationResult.ok(found)

    def _mark_discovered(self) -> None:
        try:
            self.settings.set(LAST_DISCOVERY_KEY, datetime.now().isoformat(timespec="seconds"))
        except ResourceUnavailableError:
            logger.exception("Could not record the discovery time")
