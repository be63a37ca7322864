"""
Service wiring.

A :class:`Library` bundles one catalog, one settings store, the locator built
on them and the three entity services, all sharing the same database
session. Tool handlers open one per call:

```python
with library_scope() as library:
    result = library.loans.checkout(member_id, item_id)
```
"""

from collections.abc import Callable, Generator
from contextlib import contextmanager
from datetime import date

from sqlalchemy.orm import Session

from .config import DeskConfig, get_config
from .database.documents import SqlDocumentCatalog
from .database.locator import ResourceLocator
from .database.record_store import RecordStore
from .database.session import session_scope
from .database.settings_store import SettingsStore
from .models.columns import ResourceKind
from .models.result import ErrorCode, OperationResult
from .services import ItemService, LoanService, MemberService


class Library:
    """The locator and entity services over one catalog and settings store."""

    def __init__(
        self,
        catalog: SqlDocumentCatalog,
        settings: SettingsStore,
        config: DeskConfig | None = None,
        today: Callable[[], date] = date.today,
    ):
        config = config or get_config()

        self.catalog = catalog
        self.settings = settings
        self.locator = ResourceLocator(catalog, settings, config.document_prefixes)
        self.members = MemberService(self.locator, today=today)
        self.items = ItemService(self.locator)
        self.loans = LoanService(
            self.locator,
            self.members,
            self.items,
            today=today,
            default_loan_days=config.default_loan_days,
        )

    @classmethod
    def from_session(
        cls,
        session: Session,
        config: DeskConfig | None = None,
        today: Callable[[], date] = date.today,
    ) -> "Library":
        return cls(SqlDocumentCatalog(session), SettingsStore(session), config, today)

    def store_for(self, kind: ResourceKind | str) -> RecordStore:
        return {
            ResourceKind.MEMBERS: self.members,
            ResourceKind.ITEMS: self.items,
            ResourceKind.LOANS: self.loans,
        }[ResourceKind(kind)]

    def initialize_headers(self) -> OperationResult[list[ResourceKind]]:
        """
        Run ``ensure_headers`` on every configured document.

        Succeeds when at least one document was checked; kinds that failed
        are named in the warning.
        """
        done: list[ResourceKind] = []
        problems: list[str] = []
        first_failure: ErrorCode | None = None

        for kind in ResourceKind:
            result = self.store_for(kind).ensure_headers()
            if result.success:
                done.append(kind)
            else:
                first_failure = first_failure or result.code
                problems.append(f"{kind.value}: {result.error}")

        if not done:
            return OperationResult.fail(
                first_failure or ErrorCode.RESOURCE_UNAVAILABLE,
                f"Could not initialize headers. {'; '.join(problems)}",
            )
        if problems:
            return OperationResult.ok(done, warning=f"Some headers were not initialized: {'; '.join(problems)}")
        return OperationResult.ok(done)


@contextmanager
def library_scope(config: DeskConfig | None = None) -> Generator[Library, None, None]:
    """Open a session and yield a :class:`Library` bound to it."""
    with session_scope() as session:
        yield Library.from_session(session, config)
