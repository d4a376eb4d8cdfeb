"""Background job tracking endpoints."""
import asyncio
import json
from typing import AsyncIterator, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from erp_backup.api.config import settings
from erp_backup.api.dependencies import get_redis
from erp_backup.api.jobs import JobManager
from erp_backup.api.models import JobResponse, JobStatus

router = APIRouter(prefix="/jobs", tags=["jobs"])

FINISHED = (JobStatus.COMPLETED, JobStatus.FAILED)


def sse_event(event: str, payload: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(payload)}\n\n"


def result_payload(job: JobResponse) -> dict:
    return {
        "status": job.status.value,
        "restored": job.metadata.get("restored", 0),
        "error": job.error,
    }


async def job_events(job_manager: JobManager, job_id: str, poll_interval: float) -> AsyncIterator[str]:
    """Yield a ``progress`` event per new phase, then one ``result`` event.

    A job that cannot be found yields a single ``error`` event.
    """
    last_seen = None

    while True:
        job = await job_manager.get_job(job_id)
        if job is None:
            yield sse_event("error", {"detail": f"Job {job_id} not found"})
            return

        seen = (job.progress.current, job.progress.phase)
        if seen != last_seen:
            yield sse_event("progress", {"percent": job.progress.current, "phase": job.progress.phase})
            last_seen = seen

        if job.status in FINISHED:
            yield sse_event("result", result_payload(job))
            return

        await asyncio.sleep(poll_interval)


@router.get("", response_model=List[JobResponse])
async def list_jobs(
    status: Optional[JobStatus] = None,
    limit: int = Query(100, ge=1, le=1000),
    redis_client=Depends(get_redis),
) -> List[JobResponse]:
    """Tracked jobs, newest first, optionally filtered by status."""
    return await JobManager(redis_client).list_jobs(status=status, limit=limit)


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: str,
    redis_client=Depends(get_redis),
) -> JobResponse:
    job = await JobManager(redis_client).get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail=f"Job {job_id} not found")
    return job


@router.get("/{job_id}/stream")
async def stream_job(
    job_id: str,
    redis_client=Depends(get_redis),
) -> StreamingResponse:
    """Follow a restore job as Server-Sent Events until it completes or fails."""
    return StreamingResponse(
        job_events(JobManager(redis_client), job_id, settings.job_poll_interval),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        },
    )
