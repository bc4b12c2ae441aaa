"""Orchestration of one matching pass: enrich, match, notify."""

import logging
from datetime import datetime
from typing import Callable, Optional, Tuple

from app.config.models import MatchingConfig
from app.domain.models import Item, ItemType
from app.logging import get_logger
from app.logging.context import log_context
from app.matching.engine import Enricher, MatchFinder
from app.matching.keywords import KeywordExtractor
from app.matching.models import ScoredCandidate
from app.matching.scoring import ScoreCalculator
from app.notifications.dispatcher import NotificationDispatcher
from app.notifications.models import DispatchResult, DispatchStatus
from app.persistence.database import get_session
from app.persistence.repositories import ItemRepository, MatchRepository, NotificationRepository
from app.utils.timestamps import utc_now

from .models import ProcessingResult, ProcessingStage

logger = get_logger(__name__, component="pipeline")


class MatchOrchestrator:
    """
    Runs the full matching pass for a newly created item.

    Stages run strictly in order: Created -> Enriching -> Matching ->
    Notifying -> Done. A store failure while enriching or reading the
    open-item pool aborts the pass and propagates. During Notifying every
    candidate gets its own transaction; a failure there is logged and
    counted, and the remaining candidates are still processed.

    The orchestrator holds no per-item state, so several passes (including
    two for the same item) can run concurrently from different threads.
    Duplicate passes are absorbed by the match record's insert-if-absent.
    """

    def __init__(
        self,
        config: MatchingConfig,
        enricher: Enricher,
        finder: MatchFinder,
        dispatcher: NotificationDispatcher,
        clock: Callable[[], datetime] = utc_now,
        logger_instance: Optional[logging.Logger] = None,
    ):
        self.config = config
        self.enricher = enricher
        self.finder = finder
        self.dispatcher = dispatcher
        self.clock = clock
        self.logger = logger_instance or logger

    @classmethod
    def from_config(
        cls,
        config: MatchingConfig,
        dispatcher: Optional[NotificationDispatcher] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> "MatchOrchestrator":
        """Wire the default extractor, calculator, finder and dispatcher for a config."""
        extractor = KeywordExtractor(
            stop_words=config.stop_words,
            max_keywords=config.max_keywords,
            min_token_length=config.min_token_length,
        )
        calculator = ScoreCalculator(config, extractor)
        return cls(
            config=config,
            enricher=Enricher(extractor),
            finder=MatchFinder(config, calculator, clock=clock),
            dispatcher=dispatcher or NotificationDispatcher(clock=clock),
            clock=clock,
        )

    def process_new_item(self, item: Item, trigger: str = "direct") -> ProcessingResult:
        """
        Run enrich -> match -> notify for one item.

        Args:
            item: The newly created item, as persisted
            trigger: Call site label used in logs and the result

        Returns:
            ProcessingResult; ``notifications_created`` is the count of new notifications

        Raises:
            PersistenceError: If the enrichment write or the pool read fails
        """
        result = ProcessingResult(item_id=item.id, trigger=trigger, started_at=self.clock())

        with log_context(item_id=item.id, trigger=trigger):
            self.logger.info(
                f"Processing new {item.type.value} item",
                extra={"event": "item.processing.started", "item_type": item.type.value},
            )

            try:
                result.stage = ProcessingStage.ENRICHING
                enriched = self._enrich(item)

                result.stage = ProcessingStage.MATCHING
                with get_session() as session:
                    candidates = self.finder.find(enriched, ItemRepository(session))
                result.candidates = len(candidates)
                self.logger.info(
                    f"Selected {len(candidates)} candidates",
                    extra={
                        "event": "item.matching.completed",
                        "candidates": len(candidates),
                        "threshold": self.config.threshold,
                        "max_matches": self.config.max_matches,
                        "scores": [c.score for c in candidates],
                    },
                )
            except Exception as e:
                result.finished_at = self.clock()
                self.logger.error(
                    f"Processing aborted while {result.stage.value}: {e}",
                    extra={
                        "event": "item.processing.aborted",
                        "stage": result.stage.value,
                        "error_type": type(e).__name__,
                    },
                    exc_info=True,
                )
                raise

            result.stage = ProcessingStage.NOTIFYING
            for candidate in candidates:
                self._notify(enriched, candidate, result)

            result.stage = ProcessingStage.DONE
            result.finished_at = self.clock()
            self.logger.info(
                f"Created {result.notifications_created} notifications",
                extra={
                    "event": "item.processing.completed",
                    "notifications_created": result.notifications_created,
                    "matches_created": result.matches_created,
                    "duplicates": result.duplicates,
                    "same_owner_skips": result.same_owner_skips,
                    "failures": result.failures,
                    "duration_ms": int(result.duration_seconds * 1000),
                },
            )

        return result

    def process_new_item_count(self, item: Item, trigger: str = "direct") -> int:
        """Run a pass and return only the number of notifications created."""
        return self.process_new_item(item, trigger=trigger).notifications_created

    def _enrich(self, item: Item) -> Item:
        enriched = self.enricher.apply(item)
        with get_session() as session:
            ItemRepository(session).update_enrichment(
                item.id, enriched.keywords, enriched.normalized_location
            )

        self.logger.info(
            f"Enriched item with {len(enriched.keywords)} keywords",
            extra={
                "event": "item.enriched",
                "keyword_count": len(enriched.keywords),
                "normalized_location": enriched.normalized_location,
            },
        )
        return enriched.model_copy(update={"match_processed": True})

    def _notify(self, item: Item, candidate: ScoredCandidate, result: ProcessingResult) -> None:
        """Dedup-check and dispatch one candidate in its own transaction."""
        lost, found = _orient(item, candidate.item)

        try:
            with get_session() as session:
                match_repo = MatchRepository(session)

                if match_repo.exists(lost.id, found.id):
                    dispatch_result = DispatchResult(lost.id, found.id, DispatchStatus.DUPLICATE)
                    with log_context(lost_item_id=lost.id, found_item_id=found.id):
                        self.logger.info(
                            "Match already recorded; skipping",
                            extra={"event": "match.duplicate", "score": candidate.score},
                        )
                else:
                    dispatch_result = self.dispatcher.dispatch(
                        lost,
                        found,
                        candidate.score,
                        candidate.breakdown,
                        match_repo,
                        NotificationRepository(session),
                    )
        except Exception as e:
            dispatch_result = DispatchResult(
                lost.id, found.id, DispatchStatus.FAILED, error=str(e)
            )
            with log_context(lost_item_id=lost.id, found_item_id=found.id):
                self.logger.error(
                    f"Dispatch failed: {e}",
                    extra={"event": "match.dispatch.failed", "error_type": type(e).__name__},
                    exc_info=True,
                )

        result.dispatch_results.append(dispatch_result)
        if dispatch_result.status == DispatchStatus.CREATED:
            result.matches_created += 1
            result.notifications_created += dispatch_result.notifications_created
        elif dispatch_result.status == DispatchStatus.DUPLICATE:
            result.duplicates += 1
        elif dispatch_result.status == DispatchStatus.SAME_OWNER:
            result.same_owner_skips += 1
        else:
            result.failures += 1


def _orient(item: Item, other: Item) -> Tuple[Item, Item]:
    """Return the pair as (lost, found) whichever side the new item is on."""
    if item.type == ItemType.LOST:
        return item, other
    return other, item
