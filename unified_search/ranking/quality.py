from __future__ import annotations

import re

from unified_search.schemas import CatalogItem

MAX_PENALTY = 15.0
REJECTION_THRESHOLD = 15.0
SUSPECT_PENALTY = 8.0
LOW_RATING_PENALTY = 2.0
LOW_RATING_THRESHOLD = 4.0

REJECT_TERMS = (
    "bootleg",
    "pirated",
    "camrip",
    "cam rip",
    "screener",
    "dvdscr",
    "fan made",
    "fanmade",
    "fan film",
    "fan edit",
    "porn",
    "hentai",
    "behind the scenes",
)

SUSPECT_TERMS = (
    "trailer",
    "teaser",
    "clip",
    "pilot",
    "deleted scene",
    "featurette",
    "promo",
)


def _compile(term: str, whole_word: bool = True) -> re.Pattern[str]:
    # "fan made" also matches "fan-made"; a trailing plural "s" is tolerated.
    body = r"[\s\-]+".join(re.escape(part) for part in term.split())
    if not whole_word:
        # Word prefix only, so "bootleggers" and "bootlegging" are caught too.
        return re.compile(rf"(?<![a-z0-9]){body}")
    return re.compile(rf"(?<![a-z0-9]){body}s?(?![a-z0-9])")


class QualityFilter:
    """Query-independent penalty for bootlegs, promo material and the like."""

    def __init__(
        self,
        reject_terms: tuple[str, ...] = REJECT_TERMS,
        suspect_terms: tuple[str, ...] = SUSPECT_TERMS,
    ) -> None:
        self._reject = [_compile(t, whole_word=False) for t in reject_terms]
        self._suspect = [_compile(t) for t in suspect_terms]

    def penalty(self, item: CatalogItem) -> float:
        title = (item.title or "").lower()
        if any(p.search(title) for p in self._reject):
            return MAX_PENALTY

        penalty = min(MAX_PENALTY, SUSPECT_PENALTY * sum(1 for p in self._suspect if p.search(title)))
        if penalty > 0 and item.rating is not None and item.rating < LOW_RATING_THRESHOLD:
            penalty += LOW_RATING_PENALTY
        return min(MAX_PENALTY, penalty)

    def is_rejected(self, item: CatalogItem) -> bool:
        return self.penalty(item) >= REJECTION_THRESHOLD
