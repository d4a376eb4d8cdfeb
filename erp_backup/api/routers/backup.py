"""Backup and restore API endpoints."""

import json
from typing import Any, List, Optional

from fastapi import APIRouter, BackgroundTasks, Body, Depends, File, Query, UploadFile
from fastapi.responses import FileResponse

from ..config import settings
from ..dependencies import get_backup_manager, get_redis
from ..exceptions import (
    BackupNotFoundError,
    InvalidBackupError,
    StorageUnavailableError,
    UploadTooLargeError,
)
from ..jobs import JobManager
from ..models import JobResponse, JobStatus
from erp_backup.backup import BackupManager
from erp_backup.backup.models import (
    BackupFileInfo,
    ConversionResult,
    ExportResult,
    HistoryEntry,
    RestoreMode,
    UsageEstimate,
    ValidationResult,
)
from erp_backup.exceptions import StoreUnavailable
from erp_backup._utils import logger

router = APIRouter(prefix="/backup", tags=["backup"])

PERIOD_REGEX = r"^\d{4}-(0[1-9]|1[0-2])$"


def _file_info(result: ExportResult) -> BackupFileInfo:
    metadata = result.artifact.metadata
    return BackupFileInfo(
        file_name=result.file_name,
        created_at=metadata.created_at,
        size_bytes=result.size_bytes,
        type=metadata.type,
        month=metadata.month,
        total_documents=metadata.total_documents,
        created_by=metadata.created_by,
    )


async def _run_export(coro) -> BackupFileInfo:
    try:
        return _file_info(await coro)
    except StoreUnavailable as e:
        raise StorageUnavailableError(e.backend)


@router.post("/export/full", response_model=BackupFileInfo)
async def export_full(
    created_by: str = Query("api"),
    backup_manager: BackupManager = Depends(get_backup_manager),
) -> BackupFileInfo:
    """Export every registry collection."""
    return await _run_export(backup_manager.export_full(created_by))


@router.post("/export/windowed", response_model=BackupFileInfo)
async def export_windowed(
    month: str = Query(..., pattern=PERIOD_REGEX),
    created_by: str = Query("api"),
    backup_manager: BackupManager = Depends(get_backup_manager),
) -> BackupFileInfo:
    """Export the time-bearing collections for one month (YYYY-MM)."""
    return await _run_export(backup_manager.export_windowed(month, created_by))


@router.post("/export/settings", response_model=BackupFileInfo)
async def export_settings(
    created_by: str = Query("api"),
    backup_manager: BackupManager = Depends(get_backup_manager),
) -> BackupFileInfo:
    """Export configuration collections only."""
    return await _run_export(backup_manager.export_settings(created_by))


@router.get("/files", response_model=List[BackupFileInfo])
async def list_backups(
    backup_manager: BackupManager = Depends(get_backup_manager)
) -> List[BackupFileInfo]:
    """List all packaged backups."""
    return await backup_manager.list_backups()


@router.get("/files/{file_name}/download")
async def download_backup(
    file_name: str,
    backup_manager: BackupManager = Depends(get_backup_manager)
) -> FileResponse:
    """Download a packaged backup."""
    backup_path = await backup_manager.get_backup_path(file_name)

    if not backup_path:
        raise BackupNotFoundError(file_name)

    return FileResponse(
        path=backup_path,
        media_type="application/json",
        filename=file_name,
        headers={"Content-Disposition": f"attachment; filename={file_name}"}
    )


@router.delete("/files/{file_name}")
async def delete_backup(
    file_name: str,
    backup_manager: BackupManager = Depends(get_backup_manager)
) -> dict:
    """Delete a packaged backup."""
    deleted = await backup_manager.delete_backup(file_name)

    if not deleted:
        raise BackupNotFoundError(file_name)

    return {"message": f"Backup deleted: {file_name}"}


@router.post("/validate", response_model=ValidationResult)
async def validate_backup(
    artifact: Any = Body(...),
    backup_manager: BackupManager = Depends(get_backup_manager),
) -> ValidationResult:
    """Check an artifact without touching the store."""
    return backup_manager.validate(artifact)


@router.post("/convert", response_model=ConversionResult)
async def convert_foreign(
    data: Any = Body(...),
    created_by: str = Query("supabase-import"),
    backup_manager: BackupManager = Depends(get_backup_manager),
) -> ConversionResult:
    """Convert a raw foreign row export into a standard artifact."""
    return backup_manager.convert_foreign(data, created_by)


async def _restore_backup_task(
    backup_manager: BackupManager,
    job_manager: JobManager,
    job_id: str,
    artifact: Any,
    mode: RestoreMode,
    created_by: str,
):
    """Background task to restore a backup."""
    await job_manager.update_job_status(job_id, JobStatus.PROCESSING)

    async def on_progress(step: str, percent: int) -> None:
        await job_manager.update_job_progress(job_id, percent, step)

    result = await backup_manager.restore(artifact, mode, created_by, on_progress)

    if result.success:
        await job_manager.update_job_status(
            job_id, JobStatus.COMPLETED, metadata={"restored": result.restored}
        )
        logger.info(f"Restore job {job_id} completed: {result.restored} documents")
    else:
        await job_manager.update_job_status(
            job_id, JobStatus.FAILED, result.error, metadata={"restored": result.restored}
        )
        logger.error(f"Restore job {job_id} failed: {result.error}")


@router.post("/restore", response_model=JobResponse)
async def restore_backup(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    mode: RestoreMode = Query(RestoreMode.MERGE),
    created_by: str = Query("api"),
    backup_manager: BackupManager = Depends(get_backup_manager),
    redis_client=Depends(get_redis),
) -> JobResponse:
    """Restore from an uploaded backup file.

    The artifact is validated before a job is created; an invalid upload is
    rejected and nothing runs. Returns the job tracking the restore.
    """
    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        raise UploadTooLargeError(settings.max_upload_bytes)

    try:
        artifact = json.loads(content)
    except (ValueError, UnicodeDecodeError):
        raise InvalidBackupError("Uploaded file is not valid JSON")

    validation = backup_manager.validate(artifact)
    if not validation.valid:
        raise InvalidBackupError(validation.error)

    logger.info(f"Uploaded backup file: {file.filename} ({len(content):,} bytes)")

    job_manager = JobManager(redis_client)
    job = await job_manager.create_job(
        job_type="restore",
        metadata={"mode": mode.value, "file_name": file.filename, "created_by": created_by}
    )

    background_tasks.add_task(
        _restore_backup_task,
        backup_manager,
        job_manager,
        job.job_id,
        artifact,
        mode,
        created_by,
    )

    return job


@router.get("/history", response_model=List[HistoryEntry])
async def backup_history(
    limit: Optional[int] = Query(None, ge=1, le=500),
    backup_manager: BackupManager = Depends(get_backup_manager),
) -> List[HistoryEntry]:
    """Most recent export/import records, newest first."""
    return await backup_manager.history(limit or settings.history_limit)


@router.get("/usage", response_model=UsageEstimate)
async def usage_estimate(
    backup_manager: BackupManager = Depends(get_backup_manager),
) -> UsageEstimate:
    """Document counts and approximate payload size per collection."""
    try:
        return await backup_manager.estimate_usage()
    except StoreUnavailable as e:
        raise StorageUnavailableError(e.backend)
