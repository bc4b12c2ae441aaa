"""Match finding: enrich a new item, then rank the opposite-type pool against it.

This module implements:
1. Enricher: derives the cached keyword list and normalized location
2. MatchFinder: reads open opposite-type items, drops expired ones, scores,
   filters by threshold, ranks and keeps the top candidates
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from app.config.models import MatchingConfig
from app.domain.models import Item
from app.logging import get_logger
from app.persistence.repositories import ItemRepository
from app.utils.timestamps import ensure_utc, utc_now

from .keywords import KeywordExtractor, normalize_location
from .models import Enrichment, ScoredCandidate
from .scoring import ScoreCalculator

logger = get_logger(__name__, component="matching")


class Enricher:
    """Computes the derived fields of an item from its immutable source text.

    Re-running it on the same item always yields the same result.
    """

    def __init__(self, extractor: KeywordExtractor):
        self.extractor = extractor

    def enrich(self, item: Item) -> Enrichment:
        return Enrichment(
            keywords=self.extractor.extract(item.source_text),
            normalized_location=normalize_location(item.location),
        )

    def apply(self, item: Item) -> Item:
        """Return a copy of the item with enrichment fields filled in."""
        enrichment = self.enrich(item)
        return item.model_copy(
            update={
                "keywords": enrichment.keywords,
                "normalized_location": enrichment.normalized_location,
            }
        )


class MatchFinder:
    """Selects the best opposite-type candidates for an item.

    Candidates scoring below ``config.threshold`` are discarded; the rest are
    sorted by score, highest first. The sort is stable, so equal scores keep
    the repository's retrieval order (oldest ``created_at`` first, then id).
    At most ``config.max_matches`` candidates are returned.

    The finder only reads; calling it repeatedly against an unchanged pool
    returns the same candidates.
    """

    def __init__(
        self,
        config: MatchingConfig,
        calculator: ScoreCalculator,
        clock: Callable[[], datetime] = utc_now,
        logger_instance: Optional[logging.Logger] = None,
    ):
        self.config = config
        self.calculator = calculator
        self.clock = clock
        self.logger = logger_instance or logger

    def find(self, item: Item, item_repo: ItemRepository) -> List[ScoredCandidate]:
        """Return 0 to ``max_matches`` ranked candidates for the item.

        Raises:
            PersistenceError: If the pool read fails (nothing is scored)
        """
        pool = item_repo.get_open_items_by_type(item.type.opposite())
        return self.rank(item, pool)

    def rank(self, item: Item, pool: List[Item]) -> List[ScoredCandidate]:
        """Score, filter and rank an already-fetched pool."""
        now = ensure_utc(self.clock())

        scored: List[ScoredCandidate] = []
        expired = 0
        for candidate in pool:
            if candidate.id == item.id or candidate.type == item.type:
                continue
            if candidate.is_expired(now):
                expired += 1
                continue

            result = self.calculator.score(item, candidate)
            if result.score >= self.config.threshold:
                scored.append(ScoredCandidate(candidate, result.score, result.breakdown))

        scored.sort(key=lambda c: c.score, reverse=True)
        selected = scored[: self.config.max_matches]

        self.logger.debug(
            f"Ranked {len(pool)} candidates for item {item.id}",
            extra={
                "event": "item.candidates.ranked",
                "item_id": item.id,
                "pool_size": len(pool),
                "expired_skipped": expired,
                "above_threshold": len(scored),
                "selected": len(selected),
            },
        )
        return selected
