from typing import List

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from controllers.analysis_controller import get_job, start_analysis

router = APIRouter(prefix="/v1")


class AnalysisPayload(BaseModel):
	image_ids: List[str] = Field(default_factory=list)


@router.post("/sessions/{session_id}/analysis")
async def start_analysis_route(request: Request, session_id: str, payload: AnalysisPayload):
	"""Extract facts from committed screenshots and return the finished job."""
	try:
		return await start_analysis(request, session_id, payload.image_ids)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/jobs/{job_id}")
async def get_job_route(request: Request, job_id: str):
	try:
		return await get_job(request, job_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
