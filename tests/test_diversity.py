from collections import Counter

from unified_search.ranking.diversity import DiversityRanker, sort_key
from unified_search.schemas import ScoredItem

from catalog_fakes import make_item


def scored(title, catalog, year=None, score=5.0):
    return ScoredItem(
        item=make_item(title, catalog, year=year),
        text_relevance=5.0,
        quality_penalty=0.0,
        popularity_norm=5.0,
        recency_bonus=0.0,
        final_score=score,
    )


def test_sort_key_orders_year_then_score_then_title():
    items = [
        scored("b", "film", year=2020, score=3.0),
        scored("a", "film", year=2020, score=3.0),
        scored("c", "book", year=2020, score=9.0),
        scored("d", "game", year=2024, score=1.0),
        scored("e", "music", year=None, score=20.0),
    ]
    ordered = [s.item.title for s in sorted(items, key=sort_key)]
    assert ordered == ["d", "c", "a", "b", "e"]


def test_prefix_respects_per_catalog_quota():
    # Films dominate the sorted input; the diverse prefix must still cap them.
    items = [scored(f"film {n}", "film", year=2030 - n) for n in range(10)]
    for catalog in ("book", "game", "music"):
        items += [scored(f"{catalog} {n}", catalog, year=2000 - n) for n in range(5)]

    ranked = DiversityRanker().rank(items)
    top = Counter(s.item.catalog for s in ranked[:12])
    assert max(top.values()) <= 3
    assert set(top) == {"film", "book", "game", "music"}
    assert len(ranked) == len(items)
    assert len({s.item.key for s in ranked}) == len(ranked)


def test_tail_keeps_sorted_order_and_skips_placed_items():
    items = [scored(f"film {n}", "film", year=2030 - n) for n in range(5)]
    items += [scored("book 0", "book", year=1990)]
    ranked = DiversityRanker(top_results=4, max_per_catalog=2).rank(items)
    titles = [s.item.title for s in ranked]
    assert titles == ["film 0", "film 1", "book 0", "film 2", "film 3", "film 4"]


def test_few_catalogs_fill_the_window_from_the_tail():
    items = [scored(f"film {n}", "film", year=2030 - n) for n in range(10)]
    items += [scored(f"book {n}", "book", year=2000 - n) for n in range(10)]
    ranked = DiversityRanker().rank(items)
    assert [s.item.catalog for s in ranked[:6]] == ["film"] * 3 + ["book"] * 3
    assert len(ranked) == 20


def test_total_display_cap():
    items = [scored(f"item {n}", ("film", "book", "game", "music")[n % 4], year=2000 + n) for n in range(80)]
    assert len(DiversityRanker().rank(items)) == 50
