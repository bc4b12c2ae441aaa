"""Data models produced by the scoring and match-finding steps."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from app.domain.models import Item


@dataclass(frozen=True)
class MatchBreakdown:
    """Which signals contributed to a score.

    Attributes:
        category: True if both categories were present and equal
        location: True if any location tier matched
        keyword_overlap: Number of shared keywords
        matched_keywords: Up to five shared keywords, in intersection order
    """

    category: bool = False
    location: bool = False
    keyword_overlap: int = 0
    matched_keywords: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the shape stored on match records and notifications."""
        return {
            "category": self.category,
            "location": self.location,
            "keywordOverlap": self.keyword_overlap,
            "matchedKeywords": list(self.matched_keywords),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchBreakdown":
        return cls(
            category=bool(data.get("category", False)),
            location=bool(data.get("location", False)),
            keyword_overlap=int(data.get("keywordOverlap", 0)),
            matched_keywords=list(data.get("matchedKeywords", [])),
        )


@dataclass(frozen=True)
class ScoreResult:
    """Integer similarity score in [0, 100] plus its breakdown."""

    score: int
    breakdown: MatchBreakdown


@dataclass(frozen=True)
class ScoredCandidate:
    """An opposite-type item that cleared the threshold for a given item."""

    item: Item
    score: int
    breakdown: MatchBreakdown


@dataclass(frozen=True)
class Enrichment:
    """Derived fields cached on an item after its first matching pass."""

    keywords: List[str]
    normalized_location: str
