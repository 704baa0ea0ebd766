"""Turn committed screenshots into a session's fact set."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

from dal.memory_store import MemoryStore
from models.errors import ProviderError, ValidationError
from models.fact_models import Fact
from models.session_models import JOB_DONE, JOB_FAILED, JOB_RUNNING, AnalysisJob
from services.fact_builder import build_facts, placeholder_facts
from services.providers import VisionProvider

LOGGER = logging.getLogger(__name__)

START_PROGRESS = 10
EXTRACTION_PROGRESS_SPAN = 85


@dataclass
class AnalysisRun:
    job: AnalysisJob
    facts: List[Fact]


class AnalysisService:
    """Run vision extraction over a batch of images and store the resulting facts.

    Images are processed one at a time. Any extraction failure on one image
    degrades only that image to the placeholder fact. Facts of the analyzed
    images replace their previous facts in a single swap once the batch is
    complete; facts of other images in the session are kept.
    """

    def __init__(self, store: MemoryStore, vision: Optional[VisionProvider] = None) -> None:
        self.store = store
        self.vision = vision

    @property
    def model_label(self) -> str:
        return f"openai:{self.vision.model}" if self.vision is not None else "fallback:local"

    def _validate(self, session_id: str, image_ids: Sequence[str]) -> List[str]:
        self.store.get_session(session_id)
        if not isinstance(image_ids, (list, tuple)) or not image_ids:
            raise ValidationError("image_ids must be a non-empty list")
        ids: List[str] = []
        for image_id in image_ids:
            if not isinstance(image_id, str) or not image_id.strip():
                raise ValidationError("image_ids must contain non-empty strings")
            record = self.store.get_image(session_id, image_id)
            if not record.committed:
                raise ValidationError(f"Image {image_id} has not been committed")
            if image_id not in ids:
                ids.append(image_id)
        return ids

    async def _facts_for_image(self, session_id: str, image_id: str) -> List[Fact]:
        record = self.store.get_image(session_id, image_id)
        if self.vision is None or not record.payload_b64:
            return placeholder_facts(session_id, image_id)
        try:
            ocr = await self.vision.extract(record.payload_b64, record.mime_type)
        except ProviderError as exc:
            LOGGER.warning(
                "analysis_ocr_failed session_id=%s image_id=%s error=%s",
                session_id,
                image_id,
                exc.classification,
            )
            return placeholder_facts(session_id, image_id)
        except Exception:  # pylint: disable=broad-exception-caught
            LOGGER.warning(
                "analysis_ocr_failed session_id=%s image_id=%s error=%s",
                session_id,
                image_id,
                ProviderError.classification,
                exc_info=True,
            )
            return placeholder_facts(session_id, image_id)
        if ocr.empty:
            LOGGER.warning(
                "analysis_ocr_failed session_id=%s image_id=%s error=%s",
                session_id,
                image_id,
                "ocr_empty_result",
            )
        return build_facts(session_id, image_id, ocr)

    async def analyze_images(self, session_id: str, image_ids: Sequence[str]) -> AnalysisRun:
        """Analyze `image_ids` and return the job record with the facts produced.

        Raises:
            NotFound: Unknown session or image.
            ValidationError: Empty or malformed `image_ids`, or an uncommitted image.
        """
        ids = self._validate(session_id, image_ids)
        job = self.store.create_job(session_id, ids)

        async with self.store.session_lock(session_id):
            started = time.time()
            job.status = JOB_RUNNING
            job.progress = START_PROGRESS
            job.started_at = started

            facts: List[Fact] = []
            try:
                for index, image_id in enumerate(ids, start=1):
                    facts.extend(await self._facts_for_image(session_id, image_id))
                    job.progress = START_PROGRESS + EXTRACTION_PROGRESS_SPAN * index // len(ids)
                self.store.replace_facts(session_id, facts, image_ids=ids)
            except Exception:
                job.status = JOB_FAILED
                job.error_code = "analysis_failed"
                job.finished_at = time.time()
                LOGGER.exception("Analysis job %s failed for session %s", job.id, session_id)
                raise

            job.status = JOB_DONE
            job.progress = 100
            job.finished_at = time.time()

        LOGGER.info(
            "analysis_completed session_id=%s image_ids=%s model=%s latency_ms=%d facts_count=%d",
            session_id,
            ids[:10],
            self.model_label,
            int((job.finished_at - started) * 1000),
            len(facts),
        )
        return AnalysisRun(job=job, facts=facts)
