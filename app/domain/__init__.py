"""Domain models for the lost & found match engine."""

from .models import Item, ItemStatus, ItemType, MatchRecord, Notification

__all__ = ["Item", "ItemType", "ItemStatus", "MatchRecord", "Notification"]
