"""
Browser-facing routes: editor page, rendered view, raw text and download.
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from shortpaste import services
from shortpaste.database import PasteStore
from shortpaste.dependencies import get_store, request_now
from shortpaste.exceptions import PasteNotFound
from shortpaste.languages import download_filename
from shortpaste.pages import render_404_page, render_create_page, render_paste_page

router = APIRouter()
logger = logging.getLogger(__name__)

NOT_FOUND_TEXT = "Paste not found"


@router.get("/", response_class=HTMLResponse)
async def create_page(
    fork: Optional[str] = None,
    store: PasteStore = Depends(get_store),
    now: Optional[datetime] = Depends(request_now),
) -> HTMLResponse:
    """Serve the create paste page, pre-filled when forking."""
    draft = None
    if fork:
        try:
            draft = services.fork_paste(store, fork, now=now)
        except PasteNotFound:
            logger.info(f"Fork source {fork} not found, serving empty editor")
    return HTMLResponse(render_create_page(draft))


@router.get("/{paste_id}", response_class=HTMLResponse)
async def view_paste(
    paste_id: str,
    store: PasteStore = Depends(get_store),
    now: Optional[datetime] = Depends(request_now),
) -> HTMLResponse:
    """View a paste as HTML, or a 404 page."""
    try:
        paste = services.get_paste(store, paste_id, now=now)
    except PasteNotFound:
        return HTMLResponse(render_404_page(), status_code=404)
    return HTMLResponse(render_paste_page(paste, now or store.clock()))


@router.get("/{paste_id}/raw", response_class=PlainTextResponse)
async def raw_paste(
    paste_id: str,
    store: PasteStore = Depends(get_store),
    now: Optional[datetime] = Depends(request_now),
) -> PlainTextResponse:
    """Paste content verbatim as plain text."""
    try:
        paste = services.get_paste(store, paste_id, now=now)
    except PasteNotFound:
        return PlainTextResponse(NOT_FOUND_TEXT, status_code=404)
    return PlainTextResponse(paste.content)


@router.get("/{paste_id}/download")
async def download_paste(
    paste_id: str,
    store: PasteStore = Depends(get_store),
    now: Optional[datetime] = Depends(request_now),
) -> Response:
    """Paste content as a file attachment named after its language."""
    try:
        paste = services.get_paste(store, paste_id, now=now)
    except PasteNotFound:
        return PlainTextResponse(NOT_FOUND_TEXT, status_code=404)

    filename = download_filename(paste.identifier, paste.language)
    return Response(
        content=paste.content,
        media_type="application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
