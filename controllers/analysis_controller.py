"""Analysis job helpers."""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import Request

from controllers.http_errors import core_errors
from services.analysis_service import AnalysisService


async def start_analysis(request: Request, session_id: str, image_ids: List[str]) -> Dict[str, Any]:
	"""Analyze the given images and return the finished job."""
	service: AnalysisService = request.app.state.analysis_service
	with core_errors():
		run = await service.analyze_images(session_id, image_ids)
	return {"job_id": run.job.id, "status": run.job.status, "facts_count": len(run.facts)}


async def get_job(request: Request, job_id: str) -> Dict[str, Any]:
	with core_errors():
		job = request.app.state.store.get_job(job_id)
	return {"status": job.status, "progress": job.progress}
