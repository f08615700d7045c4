from __future__ import annotations

from collections import Counter

from unified_search.schemas import ScoredItem


def sort_key(scored: ScoredItem) -> tuple[int, float, str]:
    """Newest first, then best score, then title; undated items sink below dated ones."""
    year = scored.item.year if scored.item.year is not None else -1
    return (-year, -scored.final_score, scored.item.title.lower())


class DiversityRanker:
    """
    Two-phase selection over an already sorted candidate list.

    Phase 1 fills a prefix of ``top_results`` slots, admitting an item only
    while its catalog holds fewer than ``max_per_catalog`` of those slots.
    Phase 2 appends everything not yet placed, in the original order, until
    ``total_display`` items are out.
    """

    def __init__(self, top_results: int = 12, max_per_catalog: int = 3, total_display: int = 50) -> None:
        self.top_results = top_results
        self.max_per_catalog = max_per_catalog
        self.total_display = total_display

    def rank(self, sorted_items: list[ScoredItem]) -> list[ScoredItem]:
        diverse: list[ScoredItem] = []
        placed: set[str] = set()
        per_catalog: Counter[str] = Counter()

        for scored in sorted_items:
            if len(diverse) >= self.top_results:
                break
            catalog = scored.item.catalog
            if per_catalog[catalog] < self.max_per_catalog:
                diverse.append(scored)
                placed.add(scored.item.key)
                per_catalog[catalog] += 1

        for scored in sorted_items:
            if len(diverse) >= self.total_display:
                break
            if scored.item.key not in placed:
                diverse.append(scored)
                placed.add(scored.item.key)

        return diverse[: self.total_display]
