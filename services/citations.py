"""Persist evidence for selected facts and hand out citations."""

from __future__ import annotations

from typing import List, Sequence
from uuid import uuid4

from models.fact_models import Citation, Evidence, Fact
from services.providers import EvidenceRepository

CHAT_CITATION_LIMIT = 3
DETAIL_EVIDENCE_LIMIT = 6


class CitationBuilder:
    """Write one Evidence row per cited fact.

    Every call creates fresh rows, even for facts cited in an earlier turn.
    """

    def __init__(self, repository: EvidenceRepository) -> None:
        self.repository = repository

    def record(self, session_id: str, fact: Fact) -> Evidence:
        evidence = Evidence(
            id=uuid4().hex,
            session_id=session_id,
            image_id=fact.image_id,
            fact_id=fact.id,
            bbox=fact.bbox,
            excerpt=fact.text,
            confidence=fact.confidence,
        )
        self.repository.put_evidence(evidence)
        return evidence

    def cite(self, session_id: str, facts: Sequence[Fact], limit: int = CHAT_CITATION_LIMIT) -> List[Citation]:
        """Return up to `limit` support citations for `facts`, in order."""
        citations = []
        for fact in facts[:limit]:
            evidence = self.record(session_id, fact)
            citations.append(
                Citation(
                    id=evidence.id,
                    evidence_id=evidence.id,
                    fact_id=fact.id,
                    reasoning_role="support",
                    score=fact.confidence,
                )
            )
        return citations

    def evidence_details(
        self, session_id: str, facts: Sequence[Fact], limit: int = DETAIL_EVIDENCE_LIMIT
    ) -> List[Evidence]:
        """Persist and return up to `limit` evidence rows for a detail view."""
        return [self.record(session_id, fact) for fact in facts[:limit]]
