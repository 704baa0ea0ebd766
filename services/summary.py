"""Session-level digest of extracted facts."""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, List, Sequence

from models.fact_models import Fact

MAX_HIGHLIGHTS = 3
MAX_ENTITIES = 8
MAX_TIMELINES = 8


def repeated_entities(facts: Sequence[Fact]) -> List[str]:
	"""Texts that appear on more than one fact, typically across screenshots."""
	counts = Counter(fact.text.strip() for fact in facts if len(fact.text.strip()) >= 2 and not fact.is_placeholder)
	return [text for text, count in counts.items() if count > 1]


def build_summary(facts: Sequence[Fact]) -> Dict[str, Any]:
	"""Return highlights, entities, timelines, and repeated entities for `facts`."""
	entities = [fact for fact in facts if fact.type == "entity"][:MAX_ENTITIES]
	timelines = sorted((fact for fact in facts if fact.type == "time"), key=lambda fact: fact.text)[:MAX_TIMELINES]
	return {
		"highlights": [fact.text for fact in facts[:MAX_HIGHLIGHTS]],
		"entities": [{"text": fact.text, "fact_id": fact.id, "image_id": fact.image_id} for fact in entities],
		"timelines": [{"text": fact.text, "fact_id": fact.id, "image_id": fact.image_id} for fact in timelines],
		"repeated_entities": repeated_entities(facts),
	}
