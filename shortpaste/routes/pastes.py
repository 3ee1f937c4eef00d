"""
Paste API routes.
Handles create, fetch and fork as JSON.
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from shortpaste import services
from shortpaste.config import settings
from shortpaste.database import PasteStore
from shortpaste.dependencies import get_store, request_now
from shortpaste.exceptions import PasteNotFound
from shortpaste.models import PasteCreate, PasteDraft, PasteResponse, PasteView

router = APIRouter(prefix="/api/pastes")
logger = logging.getLogger(__name__)

NOT_FOUND_DETAIL = "Paste not found"


@router.post("", response_model=PasteResponse, status_code=201)
async def create_paste(
    paste: PasteCreate,
    store: PasteStore = Depends(get_store),
    now: Optional[datetime] = Depends(request_now),
) -> PasteResponse:
    """
    Create a new paste.

    Args:
        paste: Paste data (content, language, expiration)
        store: Paste store
        now: Request time override (TEST_MODE only)

    Returns:
        Paste ID, shareable URL and expiry

    Raises:
        HTTPException: If content is blank (400)
    """
    if not paste.content.strip():
        raise HTTPException(
            status_code=400,
            detail="content is required and must be non-empty",
        )

    created = services.create_paste(
        store,
        content=paste.content,
        language=paste.language,
        expiration=paste.expiration,
        now=now,
    )

    # Generate shareable URL
    base_url = settings.APP_DOMAIN.rstrip("/")
    url = f"{base_url}/{created.identifier}"

    return PasteResponse(id=created.identifier, url=url, expires_at=created.expires_at)


@router.get("/{paste_id}", response_model=PasteView)
async def fetch_paste(
    paste_id: str,
    store: PasteStore = Depends(get_store),
    now: Optional[datetime] = Depends(request_now),
) -> PasteView:
    """
    Fetch a paste (API endpoint).

    Raises:
        HTTPException: If the paste is missing or expired (404)
    """
    try:
        paste = services.get_paste(store, paste_id, now=now)
    except PasteNotFound:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)

    return PasteView(
        id=paste.identifier,
        content=paste.content,
        language=paste.language,
        expires_at=paste.expires_at,
    )


@router.get("/{paste_id}/fork", response_model=PasteDraft)
async def fork_paste(
    paste_id: str,
    store: PasteStore = Depends(get_store),
    now: Optional[datetime] = Depends(request_now),
) -> PasteDraft:
    """Content and language of a paste, to be submitted as a new paste."""
    try:
        return services.fork_paste(store, paste_id, now=now)
    except PasteNotFound:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)
