"""Core domain models for items, match records and notifications.

This module defines the data structures shared by every layer:
- Item: a lost or found report plus its cached enrichment
- MatchRecord: audit record of an accepted lost/found pair
- Notification: a message addressed to one item owner
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.utils.timestamps import ensure_utc


class ItemType(str, Enum):
    """Kind of report."""

    LOST = "lost"
    FOUND = "found"

    def opposite(self) -> "ItemType":
        """Return the type a report of this type is matched against."""
        return ItemType.FOUND if self is ItemType.LOST else ItemType.LOST


class ItemStatus(str, Enum):
    """Lifecycle status of a report (changed by owners/admins, never by the engine)."""

    OPEN = "open"
    RESOLVED = "resolved"


class Item(BaseModel):
    """A lost or found report.

    ``keywords`` and ``normalized_location`` are enrichment fields. They are
    None until the engine has processed the item and are derived purely
    from ``title``, ``description`` and ``location``.
    """

    id: str = Field(..., min_length=1, description="Opaque unique identifier")
    type: ItemType = Field(..., description="lost or found")
    category: Optional[str] = Field(None, description="Category chosen by the owner")
    title: str = Field("", description="Short title")
    description: str = Field("", description="Free-text description")
    location: str = Field("", description="Free-text location")
    uid: str = Field(..., min_length=1, description="Owner user id")
    email: Optional[EmailStr] = Field(None, description="Owner contact email")
    status: ItemStatus = Field(ItemStatus.OPEN, description="open or resolved")
    created_at: datetime = Field(..., description="When the item was posted (UTC)")
    expires_at: Optional[datetime] = Field(
        None, description="After this instant the item is no longer matchable (UTC)"
    )
    keywords: Optional[List[str]] = Field(None, description="Cached keyword tokens")
    normalized_location: Optional[str] = Field(None, description="Cached normalized location")
    match_processed: bool = Field(False, description="Whether a matching pass has enriched it")

    @field_validator("title", "description", "location", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        """Missing free-text fields degrade to empty strings."""
        return "" if v is None else v

    @field_validator("category", mode="before")
    @classmethod
    def blank_category_to_none(cls, v: Any) -> Any:
        """An empty category is the same as no category."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("created_at", "expires_at")
    @classmethod
    def ensure_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Ensure datetime is timezone-aware and in UTC."""
        return ensure_utc(v)

    @property
    def owner_id(self) -> str:
        return self.uid

    @property
    def source_text(self) -> str:
        """Text the keyword set is derived from."""
        return f"{self.title} {self.description}"

    @property
    def is_enriched(self) -> bool:
        return self.keywords is not None and self.normalized_location is not None

    def is_expired(self, now: datetime) -> bool:
        """True when ``expires_at`` lies strictly before ``now``."""
        return self.expires_at is not None and self.expires_at < ensure_utc(now)

    model_config = {"json_schema_extra": {"example": {
        "id": "9b2f0c1e6d5a4f3e8c7b6a5d4e3f2a1b",
        "type": "lost",
        "category": "Electronics",
        "title": "Black wallet",
        "description": "Leather wallet with student card",
        "location": "Library 2nd floor",
        "uid": "user-123",
        "email": "owner@example.com",
        "status": "open",
        "created_at": "2026-10-17T09:00:00Z",
        "expires_at": "2026-10-20T09:00:00Z",
    }}}


class MatchRecord(BaseModel):
    """Audit record of an accepted (lost, found) pair.

    At most one record exists per ordered pair; the storage layer enforces
    this with a composite primary key.
    """

    lost_item_id: str = Field(..., description="The lost item of the pair")
    found_item_id: str = Field(..., description="The found item of the pair")
    score: int = Field(..., ge=0, le=100, description="Similarity score")
    matched_on: Dict[str, Any] = Field(
        default_factory=dict, description="Score breakdown as persisted for audit/UI"
    )
    created_at: datetime = Field(..., description="When the match was recorded (UTC)")
    status: str = Field("pending", description="Informational status")

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Ensure datetime is timezone-aware and in UTC."""
        return ensure_utc(v)

    @property
    def pair(self) -> tuple[str, str]:
        return (self.lost_item_id, self.found_item_id)


class Notification(BaseModel):
    """Message telling one owner about a potential match."""

    id: str = Field(..., min_length=1, description="Unique identifier")
    user_id: str = Field(..., description="Recipient user id")
    user_email: Optional[str] = Field(None, description="Recipient email, if known")
    type: str = Field("match_found", description="Notification kind")
    title: str = Field(..., description="Short headline")
    message: str = Field(..., description="Body text")
    lost_item_id: str
    found_item_id: str
    match_score: int = Field(..., ge=0, le=100)
    match_details: Dict[str, Any] = Field(default_factory=dict)
    read: bool = Field(False, description="Set by the UI when the owner opens it")
    created_at: datetime = Field(..., description="When the notification was created (UTC)")

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Ensure datetime is timezone-aware and in UTC."""
        return ensure_utc(v)
