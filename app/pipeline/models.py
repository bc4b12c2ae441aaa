"""Data models for tracking one matching pass over a new item."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from app.notifications.models import DispatchResult


class ProcessingStage(str, Enum):
    """States a new item moves through during one pass."""

    CREATED = "created"
    ENRICHING = "enriching"
    MATCHING = "matching"
    NOTIFYING = "notifying"
    DONE = "done"


@dataclass
class ProcessingResult:
    """
    Outcome of one matching pass for a new item.

    Attributes:
        item_id: The item the pass ran for
        trigger: Which call site started the pass (event, direct, sweep, cli)
        started_at: UTC timestamp when the pass began
        finished_at: UTC timestamp when the pass ended
        stage: Last stage reached (DONE unless the pass was aborted)
        candidates: Candidates the match finder selected
        matches_created: Match records inserted by this pass
        notifications_created: Notifications inserted by this pass
        duplicates: Pairs another pass had already recorded
        same_owner_skips: Pairs skipped because both items share an owner
        failures: Candidates whose dispatch failed
        dispatch_results: Per-candidate outcomes, in ranked order
    """

    item_id: str
    trigger: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    stage: ProcessingStage = ProcessingStage.CREATED
    candidates: int = 0
    matches_created: int = 0
    notifications_created: int = 0
    duplicates: int = 0
    same_owner_skips: int = 0
    failures: int = 0
    dispatch_results: List[DispatchResult] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    @property
    def had_errors(self) -> bool:
        return self.failures > 0 or self.stage != ProcessingStage.DONE

    def summary(self) -> str:
        """Return a one-line human-readable summary of the pass."""
        return (
            f"item={self.item_id} stage={self.stage.value} candidates={self.candidates} "
            f"matches={self.matches_created} notifications={self.notifications_created} "
            f"duplicates={self.duplicates} same_owner={self.same_owner_skips} "
            f"failures={self.failures} duration={self.duration_seconds:.3f}s"
        )
