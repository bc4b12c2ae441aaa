"""Catch-up sweep for items whose creation trigger never ran."""

import logging
import threading
from datetime import datetime
from typing import Callable, Optional
from uuid import uuid4

from app.logging import get_logger
from app.logging.context import log_context
from app.persistence.database import get_session
from app.persistence.repositories import ItemRepository
from app.pipeline.runner import MatchOrchestrator
from app.utils.timestamps import utc_now

from .models import SweepResult

logger = get_logger(__name__, component="sweeper")


class PendingItemSweeper:
    """Runs a matching pass for every open item not yet processed.

    Processed items are never revisited, so matching stays one-shot per
    item. Overlapping sweeps are skipped rather than queued.
    """

    def __init__(
        self,
        orchestrator: MatchOrchestrator,
        batch_size: int = 100,
        clock: Callable[[], datetime] = utc_now,
        logger_instance: Optional[logging.Logger] = None,
    ):
        self.orchestrator = orchestrator
        self.batch_size = batch_size
        self.clock = clock
        self.logger = logger_instance or logger
        self._lock = threading.Lock()

    def run_once(self) -> SweepResult:
        """Process up to ``batch_size`` pending items.

        Failures are counted per item and do not stop the sweep.
        """
        result = SweepResult(run_started_at=self.clock())
        run_id = uuid4().hex

        if not self._lock.acquire(blocking=False):
            with log_context(run_id=run_id):
                self.logger.warning(
                    "Sweep skipped: previous sweep still in progress",
                    extra={"event": "sweep.skipped", "reason": "lock_held"},
                )
            result.skipped = True
            result.run_finished_at = self.clock()
            return result

        try:
            with log_context(run_id=run_id):
                with get_session() as session:
                    pending = ItemRepository(session).get_unprocessed(limit=self.batch_size)
                result.items_found = len(pending)

                self.logger.info(
                    f"Sweep found {len(pending)} pending items",
                    extra={"event": "sweep.started", "pending": len(pending)},
                )

                for item in pending:
                    try:
                        processing = self.orchestrator.process_new_item(item, trigger="sweep")
                    except Exception as e:
                        result.failures += 1
                        result.failed_item_ids.append(item.id)
                        self.logger.error(
                            f"Sweep pass failed for item {item.id}: {e}",
                            extra={"event": "sweep.item.failed", "item_id": item.id},
                        )
                        continue

                    result.items_processed += 1
                    result.notifications_created += processing.notifications_created
                    if processing.failures:
                        result.failures += processing.failures
                        result.failed_item_ids.append(item.id)

                result.run_finished_at = self.clock()
                self.logger.info(
                    "Sweep completed",
                    extra={
                        "event": "sweep.completed",
                        "items_found": result.items_found,
                        "items_processed": result.items_processed,
                        "notifications_created": result.notifications_created,
                        "failures": result.failures,
                        "duration_ms": int(result.duration_seconds * 1000),
                    },
                )
                return result
        finally:
            self._lock.release()
