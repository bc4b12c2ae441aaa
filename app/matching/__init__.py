"""Matching engine: keyword extraction, scoring and candidate selection.

This module provides:
- KeywordExtractor / normalize_location: pure text helpers
- ScoreCalculator: category + location + keyword similarity score
- MatchFinder: threshold, rank and top-K selection over the opposite-type pool
- Enricher: derived fields cached on items
"""

from .engine import Enricher, MatchFinder
from .keywords import KeywordExtractor, normalize_location
from .models import Enrichment, MatchBreakdown, ScoreResult, ScoredCandidate
from .scoring import ScoreCalculator

__all__ = [
    "KeywordExtractor",
    "normalize_location",
    "ScoreCalculator",
    "MatchFinder",
    "Enricher",
    "Enrichment",
    "MatchBreakdown",
    "ScoreResult",
    "ScoredCandidate",
]
