"""Data access layer (repositories) for persistence operations.

Repositories wrap one SQLAlchemy session, translate between ORM rows and
domain models, and convert SQLAlchemy failures into PersistenceError.
Transaction boundaries belong to the caller (``get_session``).
"""

import logging
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.models import Item, ItemStatus, ItemType, MatchRecord, Notification

from .exceptions import DataIntegrityError, PersistenceError, RecordNotFoundError
from .schema import ItemModel, MatchRecordModel, NotificationModel

logger = logging.getLogger(__name__)


def _valid_items(rows: List[ItemModel]) -> List[Item]:
    """Convert rows to items, skipping rows that no longer validate.

    Rows are converted one at a time, so a bad row only drops itself.
    """
    items = []
    for row in rows:
        try:
            items.append(row.to_domain())
        except ValidationError as e:
            logger.warning(
                f"Skipping malformed item {row.id}: {e.error_count()} invalid field(s)",
                extra={"event": "item.row.invalid", "item_id": row.id},
            )
    return items


class ItemRepository:
    """Repository for lost and found reports."""

    def __init__(self, session: Session):
        self.session = session

    def add(self, item: Item) -> Item:
        """Insert a new item.

        Raises:
            DataIntegrityError: If an item with the same id already exists
            PersistenceError: If database error occurs
        """
        try:
            item_model = ItemModel.from_domain(item)
            self.session.add(item_model)
            self.session.flush()
            return item_model.to_domain()

        except IntegrityError as e:
            raise DataIntegrityError(f"Item {item.id} already exists: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error adding item {item.id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to add item: {e}") from e

    def get_by_id(self, item_id: str) -> Optional[Item]:
        """Retrieve an item by id, or None if it does not exist.

        Raises:
            DataIntegrityError: If the stored row no longer validates
            PersistenceError: If database error occurs
        """
        try:
            item_model = self.session.get(ItemModel, item_id)
            if item_model is None:
                return None
            return item_model.to_domain()

        except ValidationError as e:
            raise DataIntegrityError(f"Stored item {item_id} is malformed: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving item {item_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve item: {e}") from e

    def get_open_items_by_type(self, item_type: ItemType) -> List[Item]:
        """Return every open item of a type, oldest first.

        Expired items are included; filtering by expiry is the caller's job.
        Rows that fail validation are logged and skipped.
        Ties on ``created_at`` are broken by id so the order is deterministic.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = (
                select(ItemModel)
                .where(
                    ItemModel.type == ItemType(item_type).value,
                    ItemModel.status == ItemStatus.OPEN.value,
                )
                .order_by(ItemModel.created_at.asc(), ItemModel.id.asc())
            )
            return _valid_items(self.session.execute(stmt).scalars().all())

        except SQLAlchemyError as e:
            logger.error(f"Error retrieving open {item_type} items: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve open items: {e}") from e

    def update_enrichment(
        self, item_id: str, keywords: List[str], normalized_location: str
    ) -> None:
        """Write derived fields onto an item and mark it as processed.

        Raises:
            RecordNotFoundError: If the item does not exist
            PersistenceError: If database error occurs
        """
        try:
            item_model = self.session.get(ItemModel, item_id)
            if item_model is None:
                raise RecordNotFoundError(f"Item {item_id} not found")

            item_model.keywords = list(keywords)
            item_model.normalized_location = normalized_location
            item_model.match_processed = True
            self.session.flush()

        except SQLAlchemyError as e:
            logger.error(f"Error updating enrichment for item {item_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update item enrichment: {e}") from e

    def get_unprocessed(self, limit: Optional[int] = None) -> List[Item]:
        """Return open items no matching pass has processed yet, oldest first.

        Rows that fail validation are logged and skipped.
        """
        try:
            stmt = (
                select(ItemModel)
                .where(
                    ItemModel.match_processed.is_(False),
                    ItemModel.status == ItemStatus.OPEN.value,
                )
                .order_by(ItemModel.created_at.asc(), ItemModel.id.asc())
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            return _valid_items(self.session.execute(stmt).scalars().all())

        except SQLAlchemyError as e:
            logger.error(f"Error retrieving unprocessed items: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve unprocessed items: {e}") from e

    def update_status(self, item_id: str, status: ItemStatus) -> Item:
        """Change an item's lifecycle status.

        Raises:
            RecordNotFoundError: If the item does not exist
            PersistenceError: If database error occurs
        """
        try:
            item_model = self.session.get(ItemModel, item_id)
            if item_model is None:
                raise RecordNotFoundError(f"Item {item_id} not found")

            item_model.status = ItemStatus(status).value
            self.session.flush()
            return item_model.to_domain()

        except SQLAlchemyError as e:
            logger.error(f"Error updating status for item {item_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update item status: {e}") from e


class MatchRepository:
    """Repository for match records."""

    def __init__(self, session: Session):
        self.session = session

    def exists(self, lost_item_id: str, found_item_id: str) -> bool:
        """Check whether a match record exists for the ordered pair.

        This is a plain read; it does not protect against a concurrent
        writer. ``create_if_absent`` is the authoritative check.
        """
        try:
            stmt = select(MatchRecordModel.lost_item_id).where(
                MatchRecordModel.lost_item_id == lost_item_id,
                MatchRecordModel.found_item_id == found_item_id,
            )
            return self.session.execute(stmt).first() is not None

        except SQLAlchemyError as e:
            logger.error(
                f"Error checking match {lost_item_id}/{found_item_id}: {e}", exc_info=True
            )
            raise PersistenceError(f"Failed to check match record: {e}") from e

    def create_if_absent(self, record: MatchRecord) -> bool:
        """Insert a match record unless one already exists for the pair.

        The composite primary key makes the insert itself the decision: a
        uniqueness violation means another pass recorded the pair first.
        On that path the session's transaction is rolled back, so this must
        be the first write of the caller's transaction.

        Returns:
            True if this call inserted the record, False if it already existed

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            self.session.add(MatchRecordModel.from_domain(record))
            self.session.flush()
            return True

        except IntegrityError:
            self.session.rollback()
            logger.debug(
                f"Match {record.lost_item_id}/{record.found_item_id} already recorded"
            )
            return False
        except SQLAlchemyError as e:
            logger.error(
                f"Error recording match {record.lost_item_id}/{record.found_item_id}: {e}",
                exc_info=True,
            )
            raise PersistenceError(f"Failed to record match: {e}") from e

    def get(self, lost_item_id: str, found_item_id: str) -> Optional[MatchRecord]:
        try:
            record = self.session.get(
                MatchRecordModel,
                {"lost_item_id": lost_item_id, "found_item_id": found_item_id},
            )
            return record.to_domain() if record is not None else None

        except SQLAlchemyError as e:
            logger.error(
                f"Error retrieving match {lost_item_id}/{found_item_id}: {e}", exc_info=True
            )
            raise PersistenceError(f"Failed to retrieve match record: {e}") from e

    def get_for_item(self, item_id: str) -> List[MatchRecord]:
        """Return every match record the item takes part in, highest score first."""
        try:
            stmt = (
                select(MatchRecordModel)
                .where(
                    or_(
                        MatchRecordModel.lost_item_id == item_id,
                        MatchRecordModel.found_item_id == item_id,
                    )
                )
                .order_by(MatchRecordModel.score.desc(), MatchRecordModel.created_at.asc())
            )
            return [row.to_domain() for row in self.session.execute(stmt).scalars().all()]

        except SQLAlchemyError as e:
            logger.error(f"Error retrieving matches for item {item_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve match records: {e}") from e


class NotificationRepository:
    """Repository for owner notifications."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, notification: Notification) -> str:
        """Insert a notification and return its id.

        Raises:
            DataIntegrityError: If the id is already taken
            PersistenceError: If database error occurs
        """
        try:
            self.session.add(NotificationModel.from_domain(notification))
            self.session.flush()
            return notification.id

        except IntegrityError as e:
            raise DataIntegrityError(
                f"Notification {notification.id} already exists: {e}"
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Error creating notification {notification.id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to create notification: {e}") from e

    def list_for_user(self, user_id: str, unread_only: bool = False) -> List[Notification]:
        """Return a user's notifications, newest first."""
        try:
            stmt = select(NotificationModel).where(NotificationModel.user_id == user_id)
            if unread_only:
                stmt = stmt.where(NotificationModel.read.is_(False))
            stmt = stmt.order_by(NotificationModel.created_at.desc(), NotificationModel.id.asc())
            return [row.to_domain() for row in self.session.execute(stmt).scalars().all()]

        except SQLAlchemyError as e:
            logger.error(f"Error retrieving notifications for {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve notifications: {e}") from e

    def list_for_pair(self, lost_item_id: str, found_item_id: str) -> List[Notification]:
        """Return the notifications produced for one match pair."""
        try:
            stmt = (
                select(NotificationModel)
                .where(
                    NotificationModel.lost_item_id == lost_item_id,
                    NotificationModel.found_item_id == found_item_id,
                )
                .order_by(NotificationModel.created_at.asc(), NotificationModel.id.asc())
            )
            return [row.to_domain() for row in self.session.execute(stmt).scalars().all()]

        except SQLAlchemyError as e:
            logger.error(
                f"Error retrieving notifications for {lost_item_id}/{found_item_id}: {e}",
                exc_info=True,
            )
            raise PersistenceError(f"Failed to retrieve notifications: {e}") from e

    def count_unread(self, user_id: str) -> int:
        try:
            stmt = select(func.count()).select_from(NotificationModel).where(
                NotificationModel.user_id == user_id,
                NotificationModel.read.is_(False),
            )
            return int(self.session.execute(stmt).scalar_one())

        except SQLAlchemyError as e:
            logger.error(f"Error counting unread notifications for {user_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to count notifications: {e}") from e

    def mark_read(self, notification_id: str) -> None:
        """Flag a notification as read.

        Raises:
            RecordNotFoundError: If the notification does not exist
            PersistenceError: If database error occurs
        """
        try:
            notification_model = self.session.get(NotificationModel, notification_id)
            if notification_model is None:
                raise RecordNotFoundError(f"Notification {notification_id} not found")

            notification_model.read = True
            self.session.flush()

        except SQLAlchemyError as e:
            logger.error(f"Error marking notification {notification_id} read: {e}", exc_info=True)
            raise PersistenceError(f"Failed to mark notification read: {e}") from e
