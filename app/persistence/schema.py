"""Database schema definition and ORM models.

This module defines SQLAlchemy ORM models for the database schema and provides
conversion methods between ORM models and domain models.
"""

import logging

from sqlalchemy import JSON, Boolean, Column, Index, Integer, String, Text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from app.domain.models import Item, ItemStatus, ItemType, MatchRecord, Notification
from app.utils.timestamps import format_timestamp, parse_iso_datetime

logger = logging.getLogger(__name__)

Base = declarative_base()


class ItemModel(Base):
    """ORM model for the items table.

    Holds lost and found reports together with their cached enrichment.
    """

    __tablename__ = "items"

    id = Column(String(64), primary_key=True, nullable=False)
    type = Column(String(10), nullable=False)
    category = Column(String(100), nullable=True)
    title = Column(Text, nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    location = Column(Text, nullable=False, default="")
    uid = Column(String(128), nullable=False)
    email = Column(String(320), nullable=True)
    status = Column(String(20), nullable=False, default=ItemStatus.OPEN.value)

    # Timestamps (stored as ISO 8601 strings)
    created_at = Column(String(50), nullable=False)
    expires_at = Column(String(50), nullable=True)

    # Enrichment, NULL until the first matching pass
    keywords = Column(JSON, nullable=True)
    normalized_location = Column(Text, nullable=True)
    match_processed = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("idx_items_type_status", "type", "status", "created_at"),
        Index("idx_items_unprocessed", "match_processed", "created_at"),
    )

    def to_domain(self) -> Item:
        return Item(
            id=self.id,
            type=ItemType(self.type),
            category=self.category,
            title=self.title,
            description=self.description,
            location=self.location,
            uid=self.uid,
            email=self.email,
            status=ItemStatus(self.status),
            created_at=parse_iso_datetime(self.created_at),
            expires_at=parse_iso_datetime(self.expires_at),
            keywords=list(self.keywords) if self.keywords is not None else None,
            normalized_location=self.normalized_location,
            match_processed=bool(self.match_processed),
        )

    @classmethod
    def from_domain(cls, item: Item) -> "ItemModel":
        return cls(
            id=item.id,
            type=item.type.value,
            category=item.category,
            title=item.title,
            description=item.description,
            location=item.location,
            uid=item.uid,
            email=str(item.email) if item.email else None,
            status=item.status.value,
            created_at=format_timestamp(item.created_at),
            expires_at=format_timestamp(item.expires_at),
            keywords=list(item.keywords) if item.keywords is not None else None,
            normalized_location=item.normalized_location,
            match_processed=item.match_processed,
        )


class MatchRecordModel(Base):
    """ORM model for the matches table.

    The composite primary key makes a second insert for the same ordered
    (lost, found) pair fail with an integrity error.
    """

    __tablename__ = "matches"

    lost_item_id = Column(String(64), primary_key=True, nullable=False)
    found_item_id = Column(String(64), primary_key=True, nullable=False)

    score = Column(Integer, nullable=False)
    matched_on = Column(JSON, nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    created_at = Column(String(50), nullable=False)

    __table_args__ = (Index("idx_matches_found", "found_item_id"),)

    def to_domain(self) -> MatchRecord:
        return MatchRecord(
            lost_item_id=self.lost_item_id,
            found_item_id=self.found_item_id,
            score=self.score,
            matched_on=dict(self.matched_on or {}),
            status=self.status,
            created_at=parse_iso_datetime(self.created_at),
        )

    @classmethod
    def from_domain(cls, record: MatchRecord) -> "MatchRecordModel":
        return cls(
            lost_item_id=record.lost_item_id,
            found_item_id=record.found_item_id,
            score=record.score,
            matched_on=dict(record.matched_on),
            status=record.status,
            created_at=format_timestamp(record.created_at),
        )


class NotificationModel(Base):
    """ORM model for the notifications table."""

    __tablename__ = "notifications"

    id = Column(String(64), primary_key=True, nullable=False)
    user_id = Column(String(128), nullable=False)
    user_email = Column(String(320), nullable=True)
    type = Column(String(50), nullable=False)
    title = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    lost_item_id = Column(String(64), nullable=False)
    found_item_id = Column(String(64), nullable=False)
    match_score = Column(Integer, nullable=False)
    match_details = Column(JSON, nullable=False)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(String(50), nullable=False)

    __table_args__ = (
        Index("idx_notifications_user", "user_id", "created_at"),
        Index("idx_notifications_pair", "lost_item_id", "found_item_id"),
    )

    def to_domain(self) -> Notification:
        return Notification(
            id=self.id,
            user_id=self.user_id,
            user_email=self.user_email,
            type=self.type,
            title=self.title,
            message=self.message,
            lost_item_id=self.lost_item_id,
            found_item_id=self.found_item_id,
            match_score=self.match_score,
            match_details=dict(self.match_details or {}),
            read=bool(self.read),
            created_at=parse_iso_datetime(self.created_at),
        )

    @classmethod
    def from_domain(cls, notification: Notification) -> "NotificationModel":
        return cls(
            id=notification.id,
            user_id=notification.user_id,
            user_email=notification.user_email,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            lost_item_id=notification.lost_item_id,
            found_item_id=notification.found_item_id,
            match_score=notification.match_score,
            match_details=dict(notification.match_details),
            read=notification.read,
            created_at=format_timestamp(notification.created_at),
        )


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes if they don't exist (idempotent)."""
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)

        from sqlalchemy import inspect

        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")

    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
