from __future__ import annotations

from datetime import datetime

from unified_search.schemas import CatalogItem, ScoredItem, normalize_text

MAX_FINAL_SCORE = 25.0
NEUTRAL_POPULARITY = 5.0
FULL_RECENCY_BONUS = 10.0
PREFIX_BONUS = 5.0


class FinalScoreComposer:
    """
    Blend relevance, popularity and recency into one bounded score:
    60% relevance, 20% popularity, 20% recency, each on a 0..10 scale.
    A flat bonus for titles starting with the query is added on top and
    the quality penalty is subtracted last.
    """

    def __init__(
        self,
        relevance_weight: float = 0.6,
        popularity_weight: float = 0.2,
        recency_weight: float = 0.2,
        prefix_bonus: float = PREFIX_BONUS,
        current_year: int | None = None,
    ) -> None:
        self.relevance_weight = relevance_weight
        self.popularity_weight = popularity_weight
        self.recency_weight = recency_weight
        self.prefix_bonus = prefix_bonus
        self.current_year = current_year

    def compose(self, item: CatalogItem, query: str, relevance: float, penalty: float) -> ScoredItem:
        popularity = self.popularity_norm(item)
        recency = self.recency_bonus(item)
        score = (
            self.relevance_weight * relevance
            + self.popularity_weight * popularity
            + self.recency_weight * recency
        )
        normalized_query = normalize_text(query)
        if normalized_query and normalize_text(item.title).startswith(normalized_query):
            score += self.prefix_bonus
        score -= penalty
        return ScoredItem(
            item=item,
            text_relevance=relevance,
            quality_penalty=penalty,
            popularity_norm=popularity,
            recency_bonus=recency,
            final_score=max(0.0, min(MAX_FINAL_SCORE, score)),
        )

    @staticmethod
    def popularity_norm(item: CatalogItem) -> float:
        if item.rating is None or item.rating <= 0:
            return NEUTRAL_POPULARITY
        return min(10.0, item.rating)

    def recency_bonus(self, item: CatalogItem) -> float:
        if not item.year:
            return 0.0
        current_year = self.current_year or datetime.now().year
        age = current_year - item.year
        if age <= 2:
            return FULL_RECENCY_BONUS
        if age <= 5:
            return FULL_RECENCY_BONUS / 2
        return 0.0
