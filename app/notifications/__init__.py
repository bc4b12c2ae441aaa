"""Notification dispatch for accepted matches.

This module provides:
- NotificationDispatcher: writes the match record and both owner notifications
- TemplateRenderer: Jinja2 rendering of notification title/message text
- DispatchResult / DispatchStatus: per-pair outcome
- NotificationError / NotificationTemplateError
"""

from .dispatcher import NOTIFICATION_TYPE, NotificationDispatcher
from .models import (
    DispatchResult,
    DispatchStatus,
    NotificationError,
    NotificationTemplateError,
    RecipientRole,
)
from .templates import TemplateRenderer

__all__ = [
    "NOTIFICATION_TYPE",
    "NotificationDispatcher",
    "TemplateRenderer",
    "DispatchResult",
    "DispatchStatus",
    "RecipientRole",
    "NotificationError",
    "NotificationTemplateError",
]
