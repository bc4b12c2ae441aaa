"""Unit tests for keyword extraction, scoring and candidate selection."""

import re
from datetime import timedelta
from unittest.mock import Mock

import pytest

from app.config import DEFAULT_STOP_WORDS, MatchingConfig, ScoreWeights
from app.domain.models import ItemType
from app.matching import (
    Enricher,
    KeywordExtractor,
    MatchBreakdown,
    MatchFinder,
    ScoreCalculator,
    normalize_location,
)

from tests.helpers.factories import NOW, make_item, make_pair


@pytest.fixture
def extractor():
    return KeywordExtractor()


@pytest.fixture
def calculator():
    return ScoreCalculator(MatchingConfig())


def bare_item(type=ItemType.LOST, **overrides):
    """An item with no signal unless one is given explicitly."""
    fields = {"title": "", "description": "", "location": "", "category": None}
    fields.update(overrides)
    return make_item(type, **fields)


class TestKeywordExtractor:
    def test_basic_extraction(self, extractor):
        assert extractor.extract("Lost my BLACK wallet near the Library!!") == [
            "black",
            "wallet",
            "library",
        ]

    @pytest.mark.parametrize("text", [None, "", "   ", "!!! ??", "a an to of"])
    def test_empty_inputs_yield_no_keywords(self, extractor, text):
        assert extractor.extract(text) == []

    def test_short_tokens_dropped(self, extractor):
        assert extractor.extract("iPhone 13 pro max ox") == ["iphone", "pro", "max"]

    def test_punctuation_is_removed_not_split(self, extractor):
        assert extractor.extract("student's e-mail") == ["students", "email"]

    def test_domain_filler_words_dropped(self, extractor):
        text = "Please help, found keys this morning yesterday evening"
        assert extractor.extract(text) == ["keys"]

    def test_duplicates_keep_first_position(self, extractor):
        assert extractor.extract("wallet keys Wallet KEYS badge") == ["wallet", "keys", "badge"]

    def test_capped_at_twenty(self, extractor):
        text = " ".join(f"word{i:02d}" for i in range(30))
        keywords = extractor.extract(text)

        assert len(keywords) == 20
        assert keywords[0] == "word00"
        assert keywords[-1] == "word19"

    def test_repeats_do_not_crowd_out_later_words(self, extractor):
        text = " ".join(["wallet"] * 25) + " keys phone"
        assert extractor.extract(text) == ["wallet", "keys", "phone"]

    def test_output_properties_hold_for_noisy_text(self, extractor):
        text = (
            "URGENT!!! I LOST my grey Dell laptop (XPS-15) & charger at the "
            "3rd-floor study room; it has stickers & a cracked corner... "
            "Reward offered, contact me ASAP -- thanks!! " * 3
        )
        keywords = extractor.extract(text)

        assert len(keywords) <= 20
        for token in keywords:
            assert re.fullmatch(r"[a-z0-9]+", token)
            assert len(token) > 2
            assert token not in DEFAULT_STOP_WORDS

    def test_stop_words_are_injectable(self):
        extractor = KeywordExtractor(stop_words={"wallet"})
        assert extractor.extract("the wallet") == ["the"]

    def test_limits_are_configurable(self):
        extractor = KeywordExtractor(max_keywords=2, min_token_length=2)
        assert extractor.extract("ab cd ef gh") == ["ab", "cd"]

    @pytest.mark.parametrize("kwargs", [{"max_keywords": 0}, {"min_token_length": 0}])
    def test_invalid_limits_rejected(self, kwargs):
        with pytest.raises(ValueError):
            KeywordExtractor(**kwargs)

    def test_extractor_is_callable(self, extractor):
        assert extractor("blue umbrella") == ["blue", "umbrella"]


class TestNormalizeLocation:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("  Main Library  ", "main library"),
            ("GYM", "gym"),
            ("Building 5, Room 2", "building 5, room 2"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_normalize_location(self, value, expected):
        assert normalize_location(value) == expected


class TestScoreCalculator:
    def test_items_with_no_signal_score_zero(self, calculator):
        result = calculator.score(bare_item(), bare_item(ItemType.FOUND))

        assert result.score == 0
        assert result.breakdown == MatchBreakdown()

    def test_category_alone_scores_forty(self, calculator):
        lost = bare_item(category="Electronics", title="umbrella", location="Gym")
        found = bare_item(ItemType.FOUND, category="Electronics", title="keychain", location="Cafeteria")

        result = calculator.score(lost, found)

        assert result.score == 40
        assert result.breakdown.category is True
        assert result.breakdown.location is False

    def test_category_comparison_is_case_sensitive(self, calculator):
        lost = bare_item(category="Electronics")
        found = bare_item(ItemType.FOUND, category="electronics")
        assert calculator.score(lost, found).score == 0

    def test_exact_location_alone_scores_thirty(self, calculator):
        lost = bare_item(title="umbrella", location="Main Library")
        found = bare_item(ItemType.FOUND, title="keychain", location="  main library ")

        result = calculator.score(lost, found)

        assert result.score == 30
        assert result.breakdown.location is True

    def test_location_substring_scores_seventy_percent(self, calculator):
        lost = bare_item(location="Library")
        found = bare_item(ItemType.FOUND, location="Main Library")
        assert calculator.score(lost, found).score == 21

    def test_shared_location_word_scores_half(self, calculator):
        lost = bare_item(location="Main Library")
        found = bare_item(ItemType.FOUND, location="Library Cafe")
        assert calculator.score(lost, found).score == 15

    def test_shared_short_location_word_ignored(self, calculator):
        lost = bare_item(location="Bus 12")
        found = bare_item(ItemType.FOUND, location="Car 12")
        assert calculator.score(lost, found).score == 0

    def test_keyword_length_setting_leaves_location_words_alone(self):
        calculator = ScoreCalculator(MatchingConfig(min_token_length=8))
        lost = bare_item(location="Main Library")
        found = bare_item(ItemType.FOUND, location="Library Cafe")

        assert calculator.score(lost, found).score == 15

    def test_location_word_length_is_configurable(self):
        calculator = ScoreCalculator(MatchingConfig(location_min_token_length=8))
        lost = bare_item(location="Main Library")
        found = bare_item(ItemType.FOUND, location="Library Cafe")

        assert calculator.score(lost, found).score == 0

    def test_keyword_overlap(self, calculator):
        lost = bare_item(title="black wallet leather")
        found = bare_item(ItemType.FOUND, title="black wallet card")

        result = calculator.score(lost, found)

        # jaccard 2/4 plus bonus 2/5 * 0.3, times 30 = 18.6
        assert result.score == 19
        assert result.breakdown.keyword_overlap == 2
        assert result.breakdown.matched_keywords == ["black", "wallet"]

    def test_identical_items_score_one_hundred(self, calculator):
        lost, found = make_pair()

        result = calculator.score(lost, found)

        assert result.score == 100
        assert result.breakdown.category is True
        assert result.breakdown.location is True

    def test_matched_keywords_limited_to_five(self, calculator):
        text = "alpha bravo charlie delta echo foxtrot golf"
        result = calculator.score(bare_item(title=text), bare_item(ItemType.FOUND, title=text))

        assert result.breakdown.keyword_overlap == 7
        assert result.breakdown.matched_keywords == ["alpha", "bravo", "charlie", "delta", "echo"]

    def test_stored_enrichment_takes_precedence(self, calculator):
        lost = bare_item(title="wallet", keywords=["zebra"], normalized_location="north gate")
        found = bare_item(ItemType.FOUND, title="wallet", keywords=["zebra"], location="North Gate")

        result = calculator.score(lost, found)

        assert result.breakdown.matched_keywords == ["zebra"]
        assert result.breakdown.location is True

    def test_score_is_symmetric(self, calculator):
        lost = make_item(ItemType.LOST, title="red scarf", location="Gym", category="Clothing")
        found = make_item(
            ItemType.FOUND, title="red wool scarf", location="gym entrance", category="Clothing"
        )

        forward = calculator.score(lost, found)
        backward = calculator.score(found, lost)

        assert forward.score == backward.score
        assert forward.breakdown.keyword_overlap == backward.breakdown.keyword_overlap

    def test_rounding_is_half_up(self):
        config = MatchingConfig(weights=ScoreWeights(location=33))
        calculator = ScoreCalculator(config)

        lost = bare_item(location="Main Library")
        found = bare_item(ItemType.FOUND, location="Library Cafe")

        # 33 * 0.5 = 16.5
        assert calculator.score(lost, found).score == 17

    def test_score_always_in_range(self, calculator):
        heavy = ScoreCalculator(
            MatchingConfig(weights=ScoreWeights(category=100, location=100, keywords=100))
        )
        lost, found = make_pair()

        assert heavy.score(lost, found).score == 100
        assert 0 <= calculator.score(lost, bare_item(ItemType.FOUND)).score <= 100

    def test_breakdown_serialization(self):
        breakdown = MatchBreakdown(True, False, 2, ["black", "wallet"])
        data = breakdown.to_dict()

        assert data == {
            "category": True,
            "location": False,
            "keywordOverlap": 2,
            "matchedKeywords": ["black", "wallet"],
        }
        assert MatchBreakdown.from_dict(data) == breakdown


class TestEnricher:
    def test_enrich_derives_fields(self, extractor):
        item = make_item(title="Blue Umbrella", description="folding, with wooden handle", location=" Gym ")

        enrichment = Enricher(extractor).enrich(item)

        assert enrichment.keywords == ["blue", "umbrella", "folding", "wooden", "handle"]
        assert enrichment.normalized_location == "gym"

    def test_enrichment_is_idempotent(self, extractor):
        enricher = Enricher(extractor)
        item = make_item()

        once = enricher.apply(item)
        twice = enricher.apply(once)

        assert once.keywords == twice.keywords
        assert once.normalized_location == twice.normalized_location
        assert once.is_enriched


class TestMatchFinder:
    @pytest.fixture
    def finder(self):
        config = MatchingConfig()
        return MatchFinder(config, ScoreCalculator(config), clock=lambda: NOW)

    def test_find_reads_opposite_type_pool(self, finder):
        lost = make_item(ItemType.LOST)
        repo = Mock()
        repo.get_open_items_by_type.return_value = []

        assert finder.find(lost, repo) == []
        repo.get_open_items_by_type.assert_called_once_with(ItemType.FOUND)

    def test_candidates_below_threshold_dropped(self, finder):
        lost = make_item(ItemType.LOST, title="umbrella", description="", location="Gym")
        weak = make_item(ItemType.FOUND, title="keychain", description="", location="Cafeteria")  # category only: 40
        strong = make_item(ItemType.FOUND, title="keychain", description="", location="Gym")  # category + location: 70

        candidates = finder.rank(lost, [weak, strong])

        assert [c.item.id for c in candidates] == [strong.id]
        assert candidates[0].score == 70

    def test_threshold_is_inclusive(self):
        config = MatchingConfig(threshold=70)
        finder = MatchFinder(config, ScoreCalculator(config), clock=lambda: NOW)
        lost = make_item(ItemType.LOST, title="umbrella", description="", location="Gym")
        found = make_item(ItemType.FOUND, title="keychain", description="", location="Gym")

        assert len(finder.rank(lost, [found])) == 1

    def test_expired_candidates_dropped(self, finder):
        lost, _ = make_pair()
        expired = make_item(ItemType.FOUND, expires_at=NOW - timedelta(seconds=1))
        never_expires = make_item(ItemType.FOUND, expires_in=None)
        expires_now = make_item(ItemType.FOUND, expires_at=NOW)

        candidates = finder.rank(lost, [expired, never_expires, expires_now])

        assert {c.item.id for c in candidates} == {never_expires.id, expires_now.id}

    def test_sorted_by_score_descending(self, finder):
        lost = make_item(ItemType.LOST, location="Gym")
        medium = make_item(ItemType.FOUND, location="Gym", title="x", description="")
        best = make_item(ItemType.FOUND, location="Gym")

        candidates = finder.rank(lost, [medium, best])

        assert [c.item.id for c in candidates] == [best.id, medium.id]
        assert candidates[0].score > candidates[1].score

    def test_capped_at_three_with_stable_ties(self, finder):
        lost, _ = make_pair()
        pool = [make_item(ItemType.FOUND) for _ in range(5)]

        candidates = finder.rank(lost, pool)

        assert len(candidates) == 3
        assert [c.item.id for c in candidates] == [item.id for item in pool[:3]]
        assert all(c.score >= 50 for c in candidates)

    def test_item_itself_and_same_type_ignored(self, finder):
        lost, found = make_pair()
        other_lost = make_item(ItemType.LOST)

        candidates = finder.rank(lost, [lost, other_lost, found])

        assert [c.item.id for c in candidates] == [found.id]

    def test_rank_is_repeatable(self, finder):
        lost, _ = make_pair()
        pool = [make_item(ItemType.FOUND) for _ in range(4)]

        first = finder.rank(lost, pool)
        second = finder.rank(lost, pool)

        assert [(c.item.id, c.score) for c in first] == [(c.item.id, c.score) for c in second]
