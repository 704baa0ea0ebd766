"""Pick the facts relevant to a chat question.

Two strategies sit behind one interface: plain substring containment (the
default used by the chat endpoint) and token-overlap ranking. Both fall back
to a small default subset, so a non-empty fact list never yields an empty
selection.
"""

from __future__ import annotations

import re
from typing import List, Protocol, Sequence

from models.fact_models import Fact

DEFAULT_SUBSET = 5


class RelevanceScorer(Protocol):
    name: str

    def select(self, facts: Sequence[Fact], question: str) -> List[Fact]:
        ...


class SubstringRelevanceScorer:
    """Keep every fact whose text contains the question (case-insensitive)."""

    name = "substring"

    def select(self, facts: Sequence[Fact], question: str) -> List[Fact]:
        query = (question or "").strip().lower()
        if not query:
            return list(facts[:DEFAULT_SUBSET])
        matched = [fact for fact in facts if query in fact.text.lower()]
        return matched or list(facts[:DEFAULT_SUBSET])


def jaccard(a: str, b: str) -> float:
    """Whitespace-token Jaccard similarity of two strings."""
    if not a or not b:
        return 0.0
    a_tokens = set(re.split(r"\s+", a))
    b_tokens = set(re.split(r"\s+", b))
    union = a_tokens | b_tokens
    if not union:
        return 0.0
    return len(a_tokens & b_tokens) / len(union)


class TokenOverlapRelevanceScorer:
    """Rank facts by token overlap with the question.

    Keeps up to `limit` facts scoring above `threshold`; with no hit, returns
    the highest-confidence facts instead.
    """

    name = "token_overlap"

    def __init__(self, threshold: float = 0.15, limit: int = 12) -> None:
        self.threshold = threshold
        self.limit = limit

    def select(self, facts: Sequence[Fact], question: str) -> List[Fact]:
        query = (question or "").strip().lower()
        scored = [(jaccard(query, fact.text.lower()), fact) for fact in facts]
        ranked = [fact for score, fact in sorted(scored, key=lambda item: -item[0]) if score > self.threshold]
        if ranked:
            return ranked[: self.limit]
        return sorted(facts, key=lambda fact: -fact.confidence)[:DEFAULT_SUBSET]


def build_scorer(strategy: str) -> RelevanceScorer:
    """Return the scorer registered under `strategy`."""
    if strategy == TokenOverlapRelevanceScorer.name:
        return TokenOverlapRelevanceScorer()
    if strategy == SubstringRelevanceScorer.name:
        return SubstringRelevanceScorer()
    raise ValueError(f"Unknown relevance strategy '{strategy}'")
