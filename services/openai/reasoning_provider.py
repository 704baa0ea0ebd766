"""Reply coaching completions built on OpenAI's Responses API."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List

from openai import AsyncOpenAI

from services.openai.media_inputs import build_text_inputs
from services.openai.prompts import reasoning_system_prompt, reasoning_user_prompt
from services.openai.response_parser import extract_usage, require_json_object
from services.openai.retry import bounded_call, retry_invalid_output
from services.providers import PromptContext

LOGGER = logging.getLogger(__name__)


class OpenAIReasoningProvider:
	"""Ask the model for a structured answer as a raw JSON object."""

	def __init__(self, client: AsyncOpenAI, *, model: str = "gpt-4o-mini", timeout: float = 15.0) -> None:
		if client is None:
			raise ValueError("AsyncOpenAI client is required.")
		self.client = client
		self.model = model
		self.timeout = timeout

	async def complete(self, context: PromptContext) -> Dict[str, Any]:
		"""Return the parsed JSON object; unusable output is retried once."""
		inputs = build_text_inputs(reasoning_system_prompt(), reasoning_user_prompt(context))
		start = time.time()
		raw = await retry_invalid_output(lambda: self._complete_once(inputs), label="reasoning")
		LOGGER.info("Reasoning completion latency: %.3fs", time.time() - start)
		return raw

	async def _complete_once(self, inputs: List[Dict[str, Any]]) -> Dict[str, Any]:
		response = await bounded_call(
			self.client.responses.create(
				model=self.model,
				input=inputs,
				temperature=0.2,
				text={"format": {"type": "json_object"}},
			),
			self.timeout,
		)
		LOGGER.debug("Reasoning usage: %s", extract_usage(response))
		return require_json_object(response)
