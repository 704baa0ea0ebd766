"""Helpers to extract text, JSON, and usage from Responses API output."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from models.errors import ProviderInvalidOutput


def extract_text(response: Any) -> str:
	"""Return the concatenated output text of a Responses API result."""
	text = getattr(response, "output_text", None)
	if isinstance(text, str) and text:
		return text
	parts = []
	for item in getattr(response, "output", None) or []:
		if getattr(item, "type", None) != "message":
			continue
		for content in getattr(item, "content", None) or []:
			if getattr(content, "type", None) == "output_text":
				parts.append(getattr(content, "text", "") or "")
	return "".join(parts)


def parse_model_json(raw: str) -> Optional[Dict[str, Any]]:
	"""Parse the JSON object spanning the first `{` to the last `}` of `raw`.

	Returns None when there is no such span or it does not parse as a JSON object.
	"""
	first = raw.find("{")
	last = raw.rfind("}")
	if first < 0 or last <= first:
		return None
	try:
		parsed = json.loads(raw[first : last + 1])
	except json.JSONDecodeError:
		return None
	return parsed if isinstance(parsed, dict) else None


def require_json_object(response: Any) -> Dict[str, Any]:
	"""Return the response's JSON object or raise ProviderInvalidOutput."""
	parsed = parse_model_json(extract_text(response))
	if parsed is None:
		raise ProviderInvalidOutput("model output is not a JSON object")
	return parsed


def extract_usage(response: Any) -> Dict[str, Optional[int]]:
	"""Return token usage if present."""
	usage = getattr(response, "usage", None)
	return {
		"input_tokens": getattr(usage, "input_tokens", None) if usage else None,
		"output_tokens": getattr(usage, "output_tokens", None) if usage else None,
	}
