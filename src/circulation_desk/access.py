"""
Access control based on document sharing.

The desk does not keep its own user list. An administrator designates one
*access-control document* (its address stored under
``ACCESS_CONTROL_ADDRESS``) and anyone the document is shared with (owner,
editors or viewers) may use the desk. Identities are compared
case-insensitively.

When no access-control document is configured, everyone is denied.
"""

import logging

from pydantic import BaseModel

from .database.documents import DocumentCatalog
from .database.settings_store import SettingsStore
from .models.result import OperationError, ResourceUnavailableError

logger = logging.getLogger(__name__)

ACCESS_CONTROL_KEY = "ACCESS_CONTROL_ADDRESS"


class AccessDecision(BaseModel):
    """Outcome of an access check."""

    authorized: bool
    identity: str = ""
    error: str | None = None


class AccessDeniedError(OperationError):
    """Raised by :func:`require_access` when the caller may not use the desk."""


def check_access(
    identity: str | None, catalog: DocumentCatalog, settings: SettingsStore
) -> AccessDecision:
    """Decide whether ``identity`` may use the desk."""
    if not identity or not identity.strip():
        return AccessDecision(authorized=False, error="Could not determine user identity")

    identity = identity.strip()

    try:
        address = settings.get(ACCESS_CONTROL_KEY)
        if not address:
            logger.warning("Access denied for %s: access control not configured", identity)
            return AccessDecision(
                authorized=False,
                identity=identity,
                error="Access Control not configured. Contact administrator.",
            )
        sharing = catalog.sharing(address)
    except ResourceUnavailableError as e:
        logger.warning("Access check failed for %s: %s", identity, e)
        return AccessDecision(authorized=False, identity=identity, error="Could not verify access")

    allowed = {who.lower() for who in [*sharing.editors, *sharing.viewers]}
    if sharing.owner:
        allowed.add(sharing.owner.lower())

    return AccessDecision(authorized=identity.lower() in allowed, identity=identity)


def require_access(
    identity: str | None, catalog: DocumentCatalog, settings: SettingsStore
) -> AccessDecision:
    """
    Like :func:`check_access` but raises when access is refused.

    Raises:
        AccessDeniedError: If the identity is not authorized
    """
    decision = check_access(identity, catalog, settings)
    if not decision.authorized:
        raise AccessDeniedError(
            f"Access denied for user: {decision.identity}. "
            f"{decision.error or 'Contact administrator for access.'}"
        )
    return decision


def set_access_control_address(settings: SettingsStore, address: str) -> None:
    """Designate the document whose sharing list grants access."""
    settings.set(ACCESS_CONTROL_KEY, address)
    logger.info("Access control document set to %s", address)
