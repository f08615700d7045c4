import pytest
from rapidfuzz.distance import Levenshtein

from unified_search.ranking.relevance import RelevanceScorer, tokenize


scorer = RelevanceScorer()


def test_exact_match_scores_maximum():
    assert scorer.score("dune", "Dune") == 10
    assert scorer.score("  DUNE ", "dune") == 10
    assert scorer.explain("dune", "Dune") == {"exact": 10.0}


def test_tokenize_splits_on_separators_and_drops_short_tokens():
    assert tokenize("Spider-Man: Far_From home") == ["spider", "man", "far", "from", "home"]
    assert tokenize("A Quiet Place") == ["quiet", "place"]


def test_prefix_rule():
    assert scorer.explain("bat", "Batman Begins")["prefix"] == 9
    assert scorer.explain("man", "Batman Begins")["prefix"] == 0


def test_token_prefix_rule_counts_pairs_and_caps():
    assert scorer.explain("star wa", "The Star Wars")["token_prefix"] == 4
    assert scorer.explain("star wars the clone", "Star Wars: The Clone Wars")["token_prefix"] == 6


def test_substring_rule():
    assert scorer.explain("ring", "The Lord of the Rings")["substring"] == 4
    assert scorer.explain("rings lord", "The Lord of the Rings")["substring"] == 0


def test_exact_token_rule_caps_at_three():
    assert scorer.explain("lord", "The Lord of the Rings")["exact_tokens"] == 1.5
    assert scorer.explain("lord rings", "The Lord of the Rings")["exact_tokens"] == 3
    assert scorer.explain("the lord rings", "The Lord of the Rings")["exact_tokens"] == 3


def test_fuzzy_rule_only_above_threshold():
    query, title = "zelda breath of the wild", "zelda: breath of the wild"
    similarity = Levenshtein.normalized_similarity(query, title)
    assert similarity > 0.8
    assert scorer.explain(query, title)["fuzzy"] == pytest.approx(similarity * 1.5)
    assert scorer.explain("dune", "harry potter")["fuzzy"] == 0


def test_partial_rule_skips_exact_tokens():
    assert scorer.explain("potter", "harrypotterworld")["partial_tokens"] == 2
    assert scorer.explain("potter", "potter potters")["partial_tokens"] == 0
    assert scorer.explain("potter stone", "harrypotter")["partial_tokens"] == 1


def test_score_is_clamped_to_ten():
    assert scorer.explain("dune", "Dune Messiah")["prefix"] == 9
    assert scorer.score("dune", "Dune Messiah") == 10


def test_unrelated_and_empty_inputs_score_zero():
    assert scorer.score("xyz", "abc") == 0
    assert scorer.score("", "Dune") == 0
    assert scorer.score("dune", "") == 0


def test_exact_beats_partial_title():
    assert scorer.score("dune", "Dune") > scorer.score("dune", "The Dune Chronicles")
