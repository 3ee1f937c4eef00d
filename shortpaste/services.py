"""
Paste services used by the routes: the create path with identifier retry,
the read path and forking.
"""
import logging
from datetime import datetime
from typing import Callable, Optional

from shortpaste.config import settings
from shortpaste.database import PasteStore
from shortpaste.exceptions import IdentifierAllocationError, PasteConflict, PasteNotFound
from shortpaste.expiration import Expiration
from shortpaste.models import Paste, PasteDraft
from shortpaste.shortid import IdentifierGenerator

logger = logging.getLogger(__name__)


def create_paste(
    store: PasteStore,
    content: str,
    language: str,
    expiration: Expiration,
    generate: Optional[Callable[[], str]] = None,
    max_attempts: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Paste:
    """
    Create a paste under a freshly generated identifier.

    Args:
        store: Paste store to write to
        content: Text content
        language: Language tag
        expiration: Chosen time-to-live
        generate: Identifier source, defaults to a random generator
        max_attempts: Bound on identifier collisions before giving up
        now: Creation time the expiry is computed from

    Returns:
        The created paste

    Raises:
        IdentifierAllocationError: If every generated identifier was taken
        StoreUnavailable: If the backend cannot be reached
    """
    generate = generate or IdentifierGenerator(settings.SHORT_ID_LENGTH).generate
    max_attempts = max_attempts or settings.CREATE_MAX_ATTEMPTS
    expires_at = expiration.expires_at(now or store.clock())

    for attempt in range(1, max_attempts + 1):
        identifier = generate()
        try:
            return store.create(identifier, content, language, expires_at)
        except PasteConflict:
            logger.info(f"Identifier collision on attempt {attempt}/{max_attempts}, retrying")

    logger.error(f"Giving up after {max_attempts} identifier collisions")
    raise IdentifierAllocationError(max_attempts)


def get_paste(store: PasteStore, identifier: str, now: Optional[datetime] = None) -> Paste:
    """Fetch a live paste or raise PasteNotFound."""
    paste = store.get_by_identifier(identifier, now=now)
    if paste is None:
        raise PasteNotFound(identifier)
    return paste


def fork_paste(store: PasteStore, identifier: str, now: Optional[datetime] = None) -> PasteDraft:
    """Content and language of an existing paste, to seed a new one."""
    paste = get_paste(store, identifier, now=now)
    return PasteDraft(content=paste.content, language=paste.language)
