"""Builders for domain objects used across the test suite."""

from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Optional

from app.domain.models import Item, ItemStatus, ItemType

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)

_ids = count(1)


def make_item(
    type: ItemType = ItemType.LOST,
    *,
    id: Optional[str] = None,
    title: str = "Black leather wallet",
    description: str = "Leather wallet with student card and receipts",
    location: str = "Main Library",
    category: Optional[str] = "Wallets",
    uid: Optional[str] = None,
    email: Optional[str] = None,
    status: ItemStatus = ItemStatus.OPEN,
    created_at: Optional[datetime] = None,
    expires_at: Optional[datetime] = None,
    expires_in: Optional[timedelta] = timedelta(days=3),
    **overrides,
) -> Item:
    """Build an Item with sensible defaults; every field can be overridden."""
    seq = next(_ids)
    created_at = created_at or NOW - timedelta(minutes=seq)
    if expires_at is None and expires_in is not None:
        expires_at = created_at + expires_in

    return Item(
        id=id or f"{ItemType(type).value}-{seq}",
        type=type,
        category=category,
        title=title,
        description=description,
        location=location,
        uid=uid or f"user-{seq}",
        email=email,
        status=status,
        created_at=created_at,
        expires_at=expires_at,
        **overrides,
    )


def make_pair(**shared):
    """Build a lost and a found item with identical text and different owners."""
    lost = make_item(ItemType.LOST, uid="owner-lost", email="lost@example.com", **shared)
    found = make_item(ItemType.FOUND, uid="owner-found", email="found@example.com", **shared)
    return lost, found
