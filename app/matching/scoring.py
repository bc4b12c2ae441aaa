"""Similarity scoring between a lost and a found report."""

import math
from typing import List, Optional

from app.config.models import MatchingConfig
from app.domain.models import Item

from .keywords import KeywordExtractor, normalize_location
from .models import MatchBreakdown, ScoreResult


class ScoreCalculator:
    """Fuses category, location and keyword signals into one score.

    The three contributions are summed, clamped to [0, 100] and rounded half
    up. Swapping the two items never changes the score or the flags in the
    breakdown; only the order of ``matched_keywords`` follows the first item.
    """

    def __init__(self, config: MatchingConfig, extractor: Optional[KeywordExtractor] = None):
        self.config = config
        self.extractor = extractor or KeywordExtractor(
            stop_words=config.stop_words,
            max_keywords=config.max_keywords,
            min_token_length=config.min_token_length,
        )

    def score(self, first: Item, second: Item) -> ScoreResult:
        weights = self.config.weights
        total = 0.0

        category_match = bool(first.category and second.category and first.category == second.category)
        if category_match:
            total += weights.category

        location_points = self._location_points(
            self._location_of(first), self._location_of(second)
        )
        total += location_points

        first_keywords = self._keywords_of(first)
        second_keywords = self._keywords_of(second)
        shared = self._shared_keywords(first_keywords, second_keywords)
        total += self._keyword_points(first_keywords, second_keywords, shared)

        breakdown = MatchBreakdown(
            category=category_match,
            location=location_points > 0,
            keyword_overlap=len(shared),
            matched_keywords=shared[: self.config.example_keywords],
        )
        return ScoreResult(score=_round_half_up(min(max(total, 0.0), 100.0)), breakdown=breakdown)

    __call__ = score

    def _location_points(self, first: str, second: str) -> float:
        """Tiered location contribution; the first matching tier wins."""
        if not first or not second:
            return 0.0

        weight = self.config.weights.location
        if first == second:
            return weight
        if first in second or second in first:
            return weight * self.config.location_partial_factor

        second_tokens = set(second.split())
        for token in first.split():
            if len(token) >= self.config.location_min_token_length and token in second_tokens:
                return weight * self.config.location_token_factor
        return 0.0

    def _keyword_points(self, first: List[str], second: List[str], shared: List[str]) -> float:
        """Jaccard similarity plus a bonus for the absolute number of shared keywords."""
        if not shared:
            return 0.0

        union = set(first) | set(second)
        jaccard = len(shared) / len(union)
        bonus = min(len(shared) / self.config.overlap_saturation, 1.0) * self.config.overlap_bonus
        return (jaccard + bonus) * self.config.weights.keywords

    @staticmethod
    def _shared_keywords(first: List[str], second: List[str]) -> List[str]:
        second_set = set(second)
        shared = []
        for keyword in dict.fromkeys(first):
            if keyword in second_set:
                shared.append(keyword)
        return shared

    def _keywords_of(self, item: Item) -> List[str]:
        if item.keywords is not None:
            return item.keywords
        return self.extractor.extract(item.source_text)

    @staticmethod
    def _location_of(item: Item) -> str:
        if item.normalized_location:
            return item.normalized_location
        return normalize_location(item.location)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
