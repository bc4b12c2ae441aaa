"""Inputs and results of the trigger call sites."""

from concurrent.futures import Future
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from app.domain.models import Item, ItemType
from app.pipeline.models import ProcessingResult


class ItemDraft(BaseModel):
    """What an owner submits when posting a report."""

    type: ItemType
    category: Optional[str] = None
    title: str = Field("", max_length=200)
    description: str = Field("", max_length=5000)
    location: str = Field("", max_length=300)
    uid: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None


@dataclass
class PostItemResult:
    """
    Result of posting an item through the client-side path.

    Attributes:
        item: The persisted item
        notifications_created: Count from the pass this call ran itself
        processing: Full result of that pass, None if it failed
        event_future: Future of the event-triggered pass, if an event handler is wired
        error: Error message if the direct pass failed
    """

    item: Item
    notifications_created: int = 0
    processing: Optional[ProcessingResult] = None
    event_future: Optional[Future] = None
    error: Optional[str] = None


@dataclass
class SweepResult:
    """Aggregate results of one pending-item sweep."""

    run_started_at: datetime
    run_finished_at: Optional[datetime] = None
    items_found: int = 0
    items_processed: int = 0
    notifications_created: int = 0
    failures: int = 0
    failed_item_ids: List[str] = field(default_factory=list)
    skipped: bool = False

    @property
    def duration_seconds(self) -> float:
        if self.run_finished_at is None:
            return 0.0
        return (self.run_finished_at - self.run_started_at).total_seconds()

    @property
    def had_errors(self) -> bool:
        return self.failures > 0
