from __future__ import annotations

import time
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


CatalogTag = Literal["film", "book", "game", "music"]

ALL_CATALOGS: tuple[CatalogTag, ...] = ("film", "book", "game", "music")


def normalize_text(text: str) -> str:
    return (text or "").strip().lower()


class CatalogItem(BaseModel):
    """Catalog-neutral search candidate produced by an adapter.

    ``rating`` is already rescaled by the adapter onto 0-10. ``raw`` carries
    catalog-specific extras and is never read by the ranking code.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    catalog: CatalogTag
    year: Optional[int] = None
    rating: Optional[float] = None
    image: str = ""
    raw: dict[str, Any] = Field(default_factory=dict)

    @property
    def key(self) -> str:
        return f"{self.catalog}:{self.id}"


class ScoredItem(BaseModel):
    item: CatalogItem
    text_relevance: float
    quality_penalty: float
    popularity_norm: float
    recency_bonus: float
    final_score: float = Field(ge=0.0, le=25.0)


class RankedResult(CatalogItem):
    rank: int
    final_score: float
    text_relevance: float


class Query(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw: str
    normalized: str
    catalogs: frozenset[CatalogTag]
    issued_at: float

    @classmethod
    def from_text(cls, raw: str, catalogs: frozenset[CatalogTag], issued_at: float | None = None) -> "Query":
        return cls(
            raw=raw or "",
            normalized=normalize_text(raw),
            catalogs=catalogs,
            issued_at=time.time() if issued_at is None else issued_at,
        )

    @property
    def text(self) -> str:
        return self.raw.strip()


class SearchOptions(BaseModel):
    categories: frozenset[CatalogTag] = frozenset(ALL_CATALOGS)
    limit: int = Field(default=50, ge=1, le=50)
    debounce: bool = True
    debounce_key: Optional[str] = None


class SearchResponse(BaseModel):
    results: list[RankedResult] = Field(default_factory=list)
    total_count: int = 0
    response_time_ms: float = 0.0
    from_cache: bool = False
    superseded: bool = False


class SearchMetricsSnapshot(BaseModel):
    searches: int = 0
    average_response_time_ms: float = 0.0
    cache_hits: int = 0
    cache_misses: int = 0
    cache_hit_rate: float = 0.0
    adapter_failures: dict[str, int] = Field(default_factory=dict)
    popular_queries: list[tuple[str, int]] = Field(default_factory=list)
