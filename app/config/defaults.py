"""Built-in defaults for the match engine configuration."""

MATCH_THRESHOLD = 50
MAX_MATCHES_PER_PASS = 3
MAX_KEYWORDS = 20
MIN_TOKEN_LENGTH = 3
LOCATION_MIN_TOKEN_LENGTH = 3

CATEGORY_WEIGHT = 40
LOCATION_WEIGHT = 30
KEYWORD_WEIGHT = 30

# English function words plus filler that shows up in almost every report
DEFAULT_STOP_WORDS = frozenset({
    "a", "an", "the", "is", "are", "was", "were", "be", "been",
    "being", "have", "has", "had", "do", "does", "did", "will",
    "would", "could", "should", "may", "might", "must", "shall",
    "can", "need", "to", "of", "in", "for", "on", "with", "at",
    "by", "from", "as", "into", "through", "during", "before",
    "after", "above", "below", "between", "under", "again",
    "further", "then", "once", "here", "there", "when", "where",
    "why", "how", "all", "each", "few", "more", "most", "other",
    "some", "such", "no", "nor", "not", "only", "own", "same",
    "so", "than", "too", "very", "just", "and", "but", "if", "or",
    "because", "until", "while", "my", "i", "me", "we", "our",
    "you", "your", "he", "she", "it", "they", "them", "his", "her",
    "its", "their", "this", "that", "these", "those", "lost", "found",
    "please", "help", "anyone", "someone", "near", "around", "today",
    "yesterday", "morning", "evening", "night", "afternoon",
})
