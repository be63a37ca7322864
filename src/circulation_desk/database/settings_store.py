"""
Durable key/value configuration.

Holds the addresses resolved by discovery (one key per resource kind), the
time of the last successful discovery and the address of the access-control
document. Values are plain strings.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from .schema import Setting
from .session import safe_commit, safe_query

logger = logging.getLogger(__name__)


class SettingsStore:
    """Key/value settings persisted in the ``settings`` table."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, key: str) -> str | None:
        setting = safe_query(
            self.session,
            lambda s: s.get(Setting, key),
            f"Failed to read setting {key}",
        )
        return setting.value if setting is not None else None

    def set(self, key: str, value: str) -> None:
        setting = safe_query(
            self.session,
            lambda s: s.get(Setting, key),
            f"Failed to read setting {key}",
        )
        if setting is None:
            self.session.add(Setting(key=key, value=value))
        else:
            setting.value = value
        safe_commit(self.session, f"set {key}")
        logger.debug("Setting %s updated", key)

    def delete(self, key: str) -> None:
        setting = safe_query(
            self.session,
            lambda s: s.get(Setting, key),
            f"Failed to read setting {key}",
        )
        if setting is not None:
            self.session.delete(setting)
            safe_commit(self.session, f"delete {key}")

    def items(self) -> dict[str, str]:
        """Return every stored setting."""
        settings = safe_query(
            self.session,
            lambda s: s.execute(select(Setting)).scalars().all(),
            "Failed to list settings",
        )
        return {setting.key: setting.value for setting in settings}
