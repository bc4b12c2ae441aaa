"""Notification dispatch for accepted match pairs.

For each (lost, found) pair the dispatcher records one MatchRecord and two
Notifications, one per owner, inside the caller's transaction. The
MatchRecord insert goes first and doubles as the duplicate check: only the
pass whose insert wins writes notifications.
"""

import logging
import uuid
from datetime import datetime
from typing import Callable, Optional

from app.domain.models import Item, ItemType, MatchRecord, Notification
from app.logging import get_logger
from app.logging.context import log_context
from app.matching.models import MatchBreakdown
from app.persistence.repositories import MatchRepository, NotificationRepository
from app.utils.timestamps import utc_now

from .models import (
    DispatchResult,
    DispatchStatus,
    NotificationTemplateError,
    RecipientRole,
)
from .templates import TemplateRenderer

logger = get_logger(__name__, component="notification")

NOTIFICATION_TYPE = "match_found"


class NotificationDispatcher:
    """Builds and persists match records and owner notifications.

    The dispatcher does not commit. Store errors propagate so the caller's
    session rolls the whole pair back; nothing is left half written.
    """

    def __init__(
        self,
        template_renderer: Optional[TemplateRenderer] = None,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
        logger_instance: Optional[logging.Logger] = None,
    ):
        self.template_renderer = template_renderer or TemplateRenderer()
        self.clock = clock
        self.id_factory = id_factory
        self.logger = logger_instance or logger

    def dispatch(
        self,
        lost: Item,
        found: Item,
        score: int,
        breakdown: MatchBreakdown,
        match_repo: MatchRepository,
        notification_repo: NotificationRepository,
    ) -> DispatchResult:
        """Record the pair and notify both owners.

        Args:
            lost: The lost item (always the "your item" subject for its owner)
            found: The found item
            score: Similarity score of the pair
            breakdown: Score breakdown, stored verbatim
            match_repo: Match repository bound to the caller's session
            notification_repo: Notification repository bound to the same session

        Returns:
            DispatchResult; ``notifications_created`` is 2 only for status created

        Raises:
            PersistenceError: If a write fails; the caller must roll back
        """
        if lost.type != ItemType.LOST or found.type != ItemType.FOUND:
            raise ValueError(
                f"dispatch expects (lost, found), got ({lost.type.value}, {found.type.value})"
            )

        with log_context(lost_item_id=lost.id, found_item_id=found.id):
            if lost.owner_id == found.owner_id:
                self.logger.info(
                    "Skipping match between items of the same owner",
                    extra={"event": "match.same_owner", "owner_id": lost.owner_id, "score": score},
                )
                return DispatchResult(lost.id, found.id, DispatchStatus.SAME_OWNER)

            details = breakdown.to_dict()
            context = {"lost": lost, "found": found, "score": score, "breakdown": details}
            try:
                lost_text = self.template_renderer.render(RecipientRole.LOST_OWNER, context)
                found_text = self.template_renderer.render(RecipientRole.FOUND_OWNER, context)
            except NotificationTemplateError as e:
                self.logger.error(
                    f"Cannot build notification text: {e}",
                    extra={"event": "match.dispatch.failed", "reason": "template"},
                )
                return DispatchResult(
                    lost.id, found.id, DispatchStatus.FAILED, error=str(e)
                )

            now = self.clock()
            record = MatchRecord(
                lost_item_id=lost.id,
                found_item_id=found.id,
                score=score,
                matched_on=details,
                created_at=now,
            )
            if not match_repo.create_if_absent(record):
                self.logger.info(
                    "Match already recorded by another pass",
                    extra={"event": "match.duplicate", "score": score},
                )
                return DispatchResult(lost.id, found.id, DispatchStatus.DUPLICATE)

            recipients = (
                (lost, lost_text),
                (found, found_text),
            )
            for owner_item, text in recipients:
                notification_repo.create(
                    Notification(
                        id=self.id_factory(),
                        user_id=owner_item.owner_id,
                        user_email=str(owner_item.email) if owner_item.email else None,
                        type=NOTIFICATION_TYPE,
                        title=text["title"],
                        message=text["message"],
                        lost_item_id=lost.id,
                        found_item_id=found.id,
                        match_score=score,
                        match_details=details,
                        created_at=now,
                    )
                )

            self.logger.info(
                f"Match recorded with score {score}; both owners notified",
                extra={
                    "event": "match.dispatched",
                    "score": score,
                    "lost_owner": lost.owner_id,
                    "found_owner": found.owner_id,
                },
            )
            return DispatchResult(
                lost.id, found.id, DispatchStatus.CREATED, notifications_created=len(recipients)
            )
