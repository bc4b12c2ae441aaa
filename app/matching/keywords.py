"""Text normalization helpers: keyword extraction and location canonicalization."""

import re
from typing import FrozenSet, Iterable, List, Optional

from app.config.defaults import DEFAULT_STOP_WORDS, MAX_KEYWORDS, MIN_TOKEN_LENGTH

_NON_ALNUM_PATTERN = re.compile(r"[^a-z0-9\s]")


class KeywordExtractor:
    """Turns free text into an ordered list of distinct keyword tokens.

    Text is lower-cased, stripped of everything but ``[a-z0-9]`` and
    whitespace, and split on whitespace. Tokens shorter than
    ``min_token_length`` and stop words are dropped; repeated tokens keep
    their first position. At most ``max_keywords`` tokens are returned.

    Repeats are removed before the cap is applied, so a description that
    repeats one word many times still contributes up to ``max_keywords``
    distinct keywords; capping the raw token list first would keep only the
    repeated word.

    The stop-word set is injected so tests or other locales can swap it.
    """

    def __init__(
        self,
        stop_words: Iterable[str] = DEFAULT_STOP_WORDS,
        max_keywords: int = MAX_KEYWORDS,
        min_token_length: int = MIN_TOKEN_LENGTH,
    ):
        if max_keywords < 1:
            raise ValueError("max_keywords must be at least 1")
        if min_token_length < 1:
            raise ValueError("min_token_length must be at least 1")

        self.stop_words: FrozenSet[str] = frozenset(word.lower() for word in stop_words)
        self.max_keywords = max_keywords
        self.min_token_length = min_token_length

    def extract(self, text: Optional[str]) -> List[str]:
        """Extract keywords from text; None and empty text yield an empty list."""
        if not text:
            return []

        cleaned = _NON_ALNUM_PATTERN.sub("", text.lower())

        keywords: List[str] = []
        seen = set()
        for token in cleaned.split():
            if len(token) < self.min_token_length or token in self.stop_words:
                continue
            if token in seen:
                continue
            seen.add(token)
            keywords.append(token)
            if len(keywords) >= self.max_keywords:
                break

        return keywords

    __call__ = extract


def normalize_location(location: Optional[str]) -> str:
    """Lower-case and trim a free-text location. No tokenization."""
    if not location:
        return ""
    return location.lower().strip()
