from unified_search.ranking.quality import MAX_PENALTY, QualityFilter

from catalog_fakes import make_item


quality = QualityFilter()


def test_reject_terms_return_max_penalty():
    for title in [
        "Dune (Bootleg Edition)",
        "Zelda Fan-Made Remake",
        "Behind the Scenes of Dune",
        "Avatar CAMRIP",
    ]:
        item = make_item(title)
        assert quality.penalty(item) == MAX_PENALTY, title
        assert quality.is_rejected(item)


def test_suspect_term_adds_eight():
    assert quality.penalty(make_item("Dune Official Trailer", rating=7.5)) == 8
    assert quality.penalty(make_item("Lost: Deleted Scenes")) == 8


def test_suspect_terms_accumulate_up_to_cap():
    item = make_item("Dune Trailer and Teaser")
    assert quality.penalty(item) == MAX_PENALTY
    assert quality.is_rejected(item)


def test_low_rating_adds_small_penalty_only_for_suspects():
    assert quality.penalty(make_item("Firefly Pilot", rating=3.0)) == 10
    assert quality.penalty(make_item("Firefly Pilot", rating=None)) == 8
    assert quality.penalty(make_item("Firefly", rating=1.0)) == 0


def test_terms_match_whole_words_only():
    for title in ["American Psycho", "Pirates of the Caribbean", "The Clipper Ship", "Promotion"]:
        assert quality.penalty(make_item(title)) == 0, title


def test_penalty_is_independent_of_catalog():
    assert quality.penalty(make_item("Bootleg Series", "music")) == MAX_PENALTY
    assert quality.penalty(make_item("Bootleg Series", "book")) == MAX_PENALTY


def test_reject_terms_catch_inflected_forms():
    for title in ["The Bootleggers", "Bootlegging Nights", "Screeners Club"]:
        item = make_item(title)
        assert quality.is_rejected(item), title


def test_suspect_terms_stay_whole_word():
    assert quality.penalty(make_item("Trailers")) == 8
    assert quality.penalty(make_item("Trailerpark Boys")) == 0


def test_broad_terms_are_not_listed():
    assert quality.penalty(make_item("xXx: Return of Xander Cage")) == 0
    assert quality.penalty(make_item("Chain Reaction")) == 0
    assert quality.penalty(make_item("Trailer Reaction")) == 8
