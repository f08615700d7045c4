from __future__ import annotations

from loguru import logger

from unified_search.ranking.composer import FinalScoreComposer
from unified_search.ranking.diversity import DiversityRanker, sort_key
from unified_search.ranking.quality import REJECTION_THRESHOLD, QualityFilter
from unified_search.ranking.relevance import RelevanceScorer
from unified_search.schemas import CatalogItem, ScoredItem


class RankingPipeline:
    """Dedup, filter, score, sort and diversify the merged adapter output."""

    def __init__(
        self,
        scorer: RelevanceScorer | None = None,
        quality: QualityFilter | None = None,
        composer: FinalScoreComposer | None = None,
        diversity: DiversityRanker | None = None,
    ) -> None:
        self.scorer = scorer or RelevanceScorer()
        self.quality = quality or QualityFilter()
        self.composer = composer or FinalScoreComposer()
        self.diversity = diversity or DiversityRanker()

    def rank(self, query: str, items: list[CatalogItem]) -> list[ScoredItem]:
        scored: list[ScoredItem] = []
        seen: set[str] = set()
        rejected = 0
        for item in items:
            if item.key in seen:
                continue
            seen.add(item.key)
            penalty = self.quality.penalty(item)
            if penalty >= REJECTION_THRESHOLD:
                rejected += 1
                logger.debug(f"[Ranking] Rejected by quality filter | {item.catalog} '{item.title}'")
                continue
            relevance = self.scorer.score(query, item.title)
            scored.append(self.composer.compose(item, query, relevance, penalty))

        scored.sort(key=sort_key)
        ranked = self.diversity.rank(scored)
        logger.debug(
            f"[Ranking] query='{query}' candidates={len(items)} unique={len(seen)} "
            f"rejected={rejected} ranked={len(ranked)}"
        )
        return ranked
