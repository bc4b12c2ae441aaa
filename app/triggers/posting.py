"""Client-side trigger: persist a new item, then run a matching pass directly."""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, Optional

from app.domain.models import Item, ItemStatus
from app.logging import get_logger
from app.logging.context import log_context
from app.persistence.database import get_session
from app.persistence.repositories import ItemRepository
from app.pipeline.runner import MatchOrchestrator
from app.utils.timestamps import utc_now

from .events import ItemEventHandler
from .models import ItemDraft, PostItemResult

logger = get_logger(__name__, component="trigger")

DEFAULT_TTL_SECONDS = 3 * 86400


class ItemPostingService:
    """Posts items the way the owner-facing client does.

    After the item is stored, the creation event is published to the event
    handler (which starts its own pass in the background) and a second pass
    is run synchronously here. Both passes may overlap for the same item;
    the match record insert keeps each pair to one record and two
    notifications.
    """

    def __init__(
        self,
        orchestrator: MatchOrchestrator,
        event_handler: Optional[ItemEventHandler] = None,
        ttl_seconds: Optional[int] = DEFAULT_TTL_SECONDS,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
        logger_instance: Optional[logging.Logger] = None,
    ):
        self.orchestrator = orchestrator
        self.event_handler = event_handler
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self.id_factory = id_factory
        self.logger = logger_instance or logger

    def post_item(self, draft: ItemDraft) -> PostItemResult:
        """Store the item and run a matching pass for it.

        A failing pass does not undo the post: the item stays stored and the
        error is reported on the result.

        Raises:
            PersistenceError: If the item itself cannot be stored
        """
        now = self.clock()
        item = Item(
            id=self.id_factory(),
            type=draft.type,
            category=draft.category,
            title=draft.title,
            description=draft.description,
            location=draft.location,
            uid=draft.uid,
            email=draft.email,
            status=ItemStatus.OPEN,
            created_at=now,
            expires_at=now + timedelta(seconds=self.ttl_seconds) if self.ttl_seconds else None,
        )

        with get_session() as session:
            item = ItemRepository(session).add(item)

        with log_context(item_id=item.id):
            self.logger.info(
                f"Posted {item.type.value} item",
                extra={"event": "item.posted", "owner_id": item.owner_id},
            )

            result = PostItemResult(item=item)
            if self.event_handler is not None:
                result.event_future = self.event_handler.on_item_created(item.id)

            try:
                processing = self.orchestrator.process_new_item(item, trigger="direct")
            except Exception as e:
                self.logger.error(
                    f"Matching pass after posting failed: {e}",
                    extra={"event": "item.posted.matching_failed", "error_type": type(e).__name__},
                    exc_info=True,
                )
                result.error = str(e)
                return result

            result.processing = processing
            result.notifications_created = processing.notifications_created
            return result
