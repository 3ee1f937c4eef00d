"""
Pydantic models for the stored paste record and request/response validation.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from shortpaste.expiration import DEFAULT_EXPIRATION, Expiration, as_utc
from shortpaste.languages import DEFAULT_LANGUAGE


class Paste(BaseModel):
    """A stored paste. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    content: str
    language: str
    expires_at: Optional[datetime] = None

    @field_validator("expires_at")
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value) if value is not None else None

    def is_live(self, now: datetime) -> bool:
        """A paste is live until its expiry instant; at the instant itself it is stale."""
        return self.expires_at is None or self.expires_at > as_utc(now)

    def is_expired(self, as_of: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= as_utc(as_of)


class PasteCreate(BaseModel):
    """Schema for creating a new paste."""
    content: str = Field(..., min_length=1, description="Text content (required, non-empty)")
    language: str = Field(DEFAULT_LANGUAGE.id, description="Language tag used for highlighting and downloads")
    expiration: Expiration = Field(DEFAULT_EXPIRATION, description="Time-to-live: 1h, 1d, 1w, 1m or never")


class PasteResponse(BaseModel):
    """Schema for paste creation response."""
    id: str = Field(..., description="Short paste identifier")
    url: str = Field(..., description="Shareable URL to view the paste")
    expires_at: Optional[datetime] = Field(None, description="Expiry timestamp (null if never)")


class PasteView(BaseModel):
    """Schema for viewing/fetching a paste."""
    id: str = Field(..., description="Short paste identifier")
    content: str = Field(..., description="Paste text content")
    language: str = Field(..., description="Language tag")
    expires_at: Optional[datetime] = Field(None, description="Expiry timestamp (null if never)")


class PasteDraft(BaseModel):
    """Content and language of an existing paste, ready to be submitted as a new one."""
    content: str
    language: str


class HealthCheck(BaseModel):
    """Schema for health check response."""
    ok: bool = Field(..., description="Is the application healthy?")
    backend: str = Field(..., description="Storage backend in use (redis or memory)")
