"""Result types and exceptions for notification dispatch."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class NotificationError(Exception):
    """Base exception for notification-related errors."""


class NotificationTemplateError(NotificationError):
    """Raised when template rendering fails due to a missing template or variable."""


class RecipientRole(str, Enum):
    """Which owner of a match pair a notification is addressed to."""

    LOST_OWNER = "lost_owner"
    FOUND_OWNER = "found_owner"


class DispatchStatus(str, Enum):
    CREATED = "created"
    SAME_OWNER = "same_owner"
    DUPLICATE = "duplicate"
    FAILED = "failed"


@dataclass
class DispatchResult:
    """Outcome of dispatching one (lost, found) pair.

    Attributes:
        lost_item_id: Lost item of the pair
        found_item_id: Found item of the pair
        status: created, same_owner, duplicate or failed
        notifications_created: Notifications persisted by this call (0 or 2)
        error: Error message when status is failed
    """

    lost_item_id: str
    found_item_id: str
    status: DispatchStatus
    notifications_created: int = 0
    error: Optional[str] = None

    def is_success(self) -> bool:
        return self.status == DispatchStatus.CREATED

    @property
    def match_created(self) -> bool:
        return self.status == DispatchStatus.CREATED
