"""Screenshot text extraction using OpenAI's Responses API."""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from models.provider_payloads import OcrPayload, decode_payload
from services.image_slices import ImageStripper
from services.ocr_normalizer import merge_ocr_results, normalize_ocr
from services.openai.media_inputs import build_image_inputs
from services.openai.prompts import vision_system_prompt, vision_user_prompt
from services.openai.response_parser import extract_usage, require_json_object
from services.openai.retry import bounded_call, retry_invalid_output
from services.providers import OcrResult

LOGGER = logging.getLogger(__name__)


class VisionExtractor:
    """Extract ordered chat messages, entities, and cues from a screenshot."""

    def __init__(
        self,
        client: AsyncOpenAI,
        *,
        model: str = "gpt-4o-mini",
        timeout: float = 20.0,
        stripper: Optional[ImageStripper] = None,
    ) -> None:
        """Initialize the extractor with an OpenAI async client.

        Args:
            client: Shared AsyncOpenAI client.
            model: Vision-capable model name.
            timeout: Seconds before a single attempt is abandoned.
            stripper: Optional strip cutter for tall screenshots.
        """
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.model = model
        self.timeout = timeout
        self.stripper = stripper
        self.system_prompt = vision_system_prompt()

    async def extract(self, image_b64: str, mime_type: str) -> OcrResult:
        """Return the normalized extraction for one image.

        Raises:
            ProviderError: Any provider failure; unusable output is retried once first.
        """
        start_time = time.time()
        if self.stripper is not None:
            batches = await asyncio.to_thread(self.stripper.batches, image_b64, mime_type)
        else:
            batches = [[(mime_type, image_b64)]]

        parts: List[OcrResult] = []
        for index, strips in enumerate(batches, start=1):
            prompt = vision_user_prompt(len(strips), part=index, parts=len(batches))
            inputs = build_image_inputs(self.system_prompt, prompt, strips)
            payload = await retry_invalid_output(
                lambda inputs=inputs: self._extract_once(inputs), label="vision extraction"
            )
            parts.append(normalize_ocr(payload, model=self.model))

        result = merge_ocr_results(parts)
        LOGGER.info(
            "Vision extraction finished: strips=%s requests=%s messages=%s latency=%.3fs",
            sum(len(strips) for strips in batches),
            len(batches),
            len(result.messages),
            time.time() - start_time,
        )
        return result

    async def _extract_once(self, inputs: List[Dict[str, Any]]) -> OcrPayload:
        response = await bounded_call(
            self.client.responses.create(
                model=self.model,
                input=inputs,
                temperature=0.1,
                text={"format": {"type": "json_object"}},
            ),
            self.timeout,
        )
        LOGGER.debug("Vision usage: %s", extract_usage(response))
        return decode_payload(require_json_object(response), OcrPayload)
