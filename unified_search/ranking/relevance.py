"""Title relevance scoring.

The score is the sum of an ordered list of independent rules, each looking at
the same pre-tokenized view of the query and title. Keeping every bonus as a
named rule lets each one be tested on its own and tuned without touching the
others.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable

from rapidfuzz.distance import Levenshtein

from unified_search.schemas import normalize_text

MAX_RELEVANCE = 10.0
MIN_TOKEN_LENGTH = 2
MIN_PARTIAL_TOKEN_LENGTH = 3
FUZZY_THRESHOLD = 0.8

_TOKEN_SPLIT = re.compile(r"[\s\-:_]+")


def tokenize(text: str) -> list[str]:
    return [t for t in _TOKEN_SPLIT.split(normalize_text(text)) if len(t) >= MIN_TOKEN_LENGTH]


@dataclass(frozen=True)
class TitleMatch:
    query: str
    title: str
    query_tokens: list[str] = field(default_factory=list)
    title_tokens: list[str] = field(default_factory=list)

    @classmethod
    def build(cls, query: str, title: str) -> "TitleMatch":
        return cls(
            query=normalize_text(query),
            title=normalize_text(title),
            query_tokens=tokenize(query),
            title_tokens=tokenize(title),
        )


@dataclass(frozen=True)
class RelevanceRule:
    name: str
    score: Callable[[TitleMatch], float]


def _prefix(match: TitleMatch) -> float:
    return 9.0 if match.title.startswith(match.query) else 0.0


def _token_prefix(match: TitleMatch) -> float:
    pairs = sum(1 for q in match.query_tokens for t in match.title_tokens if t.startswith(q))
    return min(6.0, pairs * 2.0)


def _substring(match: TitleMatch) -> float:
    return 4.0 if match.query in match.title else 0.0


def _exact_tokens(match: TitleMatch) -> float:
    title_tokens = set(match.title_tokens)
    hits = sum(1 for q in set(match.query_tokens) if q in title_tokens)
    return min(3.0, hits * 1.5)


def _fuzzy(match: TitleMatch) -> float:
    similarity = Levenshtein.normalized_similarity(match.query, match.title)
    return similarity * 1.5 if similarity > FUZZY_THRESHOLD else 0.0


def _partial_tokens(match: TitleMatch) -> float:
    candidates = [q for q in dict.fromkeys(match.query_tokens) if len(q) >= MIN_PARTIAL_TOKEN_LENGTH]
    if not candidates:
        return 0.0
    title_tokens = set(match.title_tokens)
    hits = 0
    for q in candidates:
        if q in title_tokens:
            continue
        if any(len(t) > len(q) and q in t for t in title_tokens):
            hits += 1
    return 2.0 * hits / len(candidates)


DEFAULT_RULES: tuple[RelevanceRule, ...] = (
    RelevanceRule("prefix", _prefix),
    RelevanceRule("token_prefix", _token_prefix),
    RelevanceRule("substring", _substring),
    RelevanceRule("exact_tokens", _exact_tokens),
    RelevanceRule("fuzzy", _fuzzy),
    RelevanceRule("partial_tokens", _partial_tokens),
)


class RelevanceScorer:
    def __init__(self, rules: tuple[RelevanceRule, ...] = DEFAULT_RULES) -> None:
        self.rules = rules

    def score(self, query: str, title: str) -> float:
        match = TitleMatch.build(query, title)
        if not match.query or not match.title:
            return 0.0
        if match.title == match.query:
            return MAX_RELEVANCE
        total = sum(rule.score(match) for rule in self.rules)
        return max(0.0, min(MAX_RELEVANCE, total))

    def explain(self, query: str, title: str) -> dict[str, float]:
        """Per-rule contributions before clamping; ``exact`` short-circuits the rest."""
        match = TitleMatch.build(query, title)
        if match.query and match.title == match.query:
            return {"exact": MAX_RELEVANCE}
        return {rule.name: rule.score(match) for rule in self.rules}
