"""
FastAPI dependencies shared by the route modules.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Header, Request

from shortpaste.config import settings
from shortpaste.database import PasteStore

logger = logging.getLogger(__name__)


def get_store(request: Request) -> PasteStore:
    """Paste store opened by the application lifespan."""
    return request.app.state.store


def request_now(x_test_now_ms: Optional[str] = Header(None)) -> Optional[datetime]:
    """
    Current time for the request, respecting TEST_MODE for deterministic testing.

    Returns None outside TEST_MODE so the store's own clock is used.
    """
    if settings.TEST_MODE and x_test_now_ms:
        try:
            # Convert milliseconds to seconds
            timestamp_ms = int(x_test_now_ms)
            return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
        except (ValueError, TypeError) as e:
            logger.warning(f"Invalid x-test-now-ms header: {e}")

    return None
