"""Admin routes for maintenance jobs."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from chatmeter.config import get_settings
from chatmeter.contracts import JobListResponse, JobRunResponse
from chatmeter.db.session import Database
from chatmeter.routes.depends import get_clock, require_database
from chatmeter.services.operations import JOB_NAMES, build_jobs
from chatmeter.shared_utils import Clock

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/jobs", response_model=JobListResponse)
async def list_jobs() -> JobListResponse:
    return JobListResponse(jobs=list(JOB_NAMES))


@router.post("/jobs/{name}/run", response_model=JobRunResponse)
async def run_job(
    name: str,
    db: Database = Depends(require_database),
    clock: Clock = Depends(get_clock),
) -> JobRunResponse:
    """Run one maintenance job immediately, outside its schedule."""
    jobs = build_jobs(db, get_settings(), clock=clock)
    job = jobs.get(name)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Job '{name}' not found")

    affected = await job.run()
    logger.info("Manual job run %s affected %d rows", name, affected)
    return JobRunResponse(job=name, affected=affected)
