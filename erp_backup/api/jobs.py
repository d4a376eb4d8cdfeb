"""Job tracking for background export and restore runs."""
import os
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

import redis.asyncio as redis

from erp_backup._utils import logger
from erp_backup.api.models import JobProgress, JobResponse, JobStatus


class JobManager:
    """Manages job lifecycle and tracking with Redis backend.

    Without a Redis client jobs are still created and returned, but nothing
    is persisted and lookups return None.
    """

    def __init__(self, redis_client: Optional[redis.Redis] = None):
        self.redis = redis_client
        # Configurable TTL via environment variable (default: 7 days)
        self.job_ttl = int(os.getenv("REDIS_JOB_TTL", "604800"))

    async def _save(self, job: JobResponse) -> None:
        if self.redis:
            await self.redis.setex(
                f"job:{job.job_id}",
                self.job_ttl,
                job.model_dump_json()
            )

    async def create_job(
        self,
        job_type: str,
        metadata: Optional[Dict] = None
    ) -> JobResponse:
        """Create a new job and store in Redis."""
        job = JobResponse(
            job_id=str(uuid.uuid4()),
            job_type=job_type,
            status=JobStatus.PENDING,
            created_at=datetime.now(timezone.utc),
            progress=JobProgress(),
            metadata=metadata or {}
        )

        await self._save(job)

        logger.info(f"Created {job_type} job {job.job_id}")
        return job

    async def get_job(self, job_id: str) -> Optional[JobResponse]:
        """Retrieve job details from Redis."""
        if not self.redis:
            return None

        job_data = await self.redis.get(f"job:{job_id}")
        if job_data:
            return JobResponse.model_validate_json(job_data)
        return None

    async def update_job_status(
        self,
        job_id: str,
        status: JobStatus,
        error: Optional[str] = None,
        metadata: Optional[Dict] = None
    ) -> bool:
        """Update job status."""
        job = await self.get_job(job_id)
        if not job:
            return False

        job.status = status
        if metadata:
            job.metadata.update(metadata)
        if status == JobStatus.COMPLETED:
            job.completed_at = datetime.now(timezone.utc)
        elif status == JobStatus.FAILED:
            job.error = error
            job.completed_at = datetime.now(timezone.utc)

        await self._save(job)

        logger.info(f"Updated job {job_id} status to {status.value}")
        return True

    async def update_job_progress(
        self,
        job_id: str,
        current: int,
        phase: str
    ) -> bool:
        """Update job progress."""
        job = await self.get_job(job_id)
        if not job:
            return False

        job.progress.current = current
        job.progress.phase = phase

        await self._save(job)
        return True

    async def list_jobs(
        self,
        status: Optional[JobStatus] = None,
        limit: int = 100
    ) -> List[JobResponse]:
        """List all jobs, optionally filtered by status."""
        if not self.redis:
            return []

        # Use SCAN instead of KEYS to avoid blocking Redis
        cursor = 0
        job_keys = []

        while True:
            cursor, keys = await self.redis.scan(
                cursor, match="job:*", count=100
            )
            job_keys.extend(keys)

            if cursor == 0 or len(job_keys) >= limit * 2:  # Get extra to account for filtering
                break

        jobs = []
        for key in job_keys:
            if len(jobs) >= limit:
                break

            job_data = await self.redis.get(key)
            if job_data:
                try:
                    job = JobResponse.model_validate_json(job_data)
                    if status is None or job.status == status:
                        jobs.append(job)
                except Exception as e:
                    logger.warning(f"Failed to parse job data for {key}: {e}")
                    continue

        jobs.sort(key=lambda x: x.created_at, reverse=True)
        return jobs[:limit]
