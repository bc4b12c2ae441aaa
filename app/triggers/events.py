"""Server-side trigger: react to item creation events."""

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Optional

from app.logging import get_logger
from app.persistence.database import get_session
from app.persistence.repositories import ItemRepository
from app.pipeline.models import ProcessingResult
from app.pipeline.runner import MatchOrchestrator

logger = get_logger(__name__, component="trigger")


class ItemEventHandler:
    """Runs a matching pass in the background whenever an item is created.

    ``on_item_created`` returns immediately with a Future; the pass itself
    runs on the executor. Passes for different items carry no ordering
    guarantee relative to each other.
    """

    def __init__(
        self,
        orchestrator: MatchOrchestrator,
        executor: Optional[Executor] = None,
        max_workers: int = 4,
        logger_instance: Optional[logging.Logger] = None,
    ):
        self.orchestrator = orchestrator
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="item-trigger"
        )
        self.logger = logger_instance or logger

    def on_item_created(self, item_id: str) -> Future:
        """Schedule a pass for the item and return its Future.

        The Future resolves to a ProcessingResult, or to None if the item no
        longer exists by the time the worker loads it.
        """
        self.logger.debug(
            "Item creation event received",
            extra={"event": "item.created.received", "item_id": item_id},
        )
        future = self.executor.submit(self._handle, item_id)
        future.add_done_callback(lambda f: self._log_failure(item_id, f))
        return future

    def _handle(self, item_id: str) -> Optional[ProcessingResult]:
        with get_session() as session:
            item = ItemRepository(session).get_by_id(item_id)

        if item is None:
            self.logger.warning(
                f"Item {item_id} vanished before it could be processed",
                extra={"event": "item.created.missing", "item_id": item_id},
            )
            return None

        return self.orchestrator.process_new_item(item, trigger="event")

    def _log_failure(self, item_id: str, future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            self.logger.error(
                f"Event-triggered pass failed for item {item_id}: {error}",
                extra={
                    "event": "item.created.failed",
                    "item_id": item_id,
                    "error_type": type(error).__name__,
                },
            )

    def shutdown(self, wait: bool = True) -> None:
        """Stop the executor if this handler created it."""
        if self._owns_executor:
            self.executor.shutdown(wait=wait)
