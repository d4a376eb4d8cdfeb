"""Backup and restore engine bound to one document store."""

from pathlib import Path
from typing import Any, List, Optional, Union

from ..base import BaseDocumentStore
from ..registry import BACKUP_VERSION
from .._utils import logger
from .accessor import CollectionAccessor
from .exporter import ExportOrchestrator
from .foreign import convert_foreign_export
from .history import HistoryLedger
from .journal import ChunkLog
from .models import (
    BackupArtifact,
    BackupFileInfo,
    ConversionResult,
    ExportResult,
    HistoryEntry,
    RestoreMode,
    RestoreResult,
    UsageEstimate,
    ValidationResult,
)
from .restore import ProgressCallback, RestoreOrchestrator
from .usage import UsageEstimator
from .utils import ARTIFACT_SUFFIX, load_artifact
from .validator import validate_artifact
from .writer import BatchWriter


class BackupManager:
    """Orchestrate export, restore and audit for a single store.

    Every component is constructed around the injected store, so several
    managers can target different stores in one process.
    """

    def __init__(
        self,
        store: BaseDocumentStore,
        backup_dir: str = "./backups",
        version: str = BACKUP_VERSION,
    ):
        """Initialize backup manager.

        Args:
            store: Document store to back up and restore into
            backup_dir: Directory for packaged artifacts
            version: Artifact format version written and accepted
        """
        self.store = store
        self.version = version
        self.backup_dir = Path(backup_dir)
        self.backup_dir.mkdir(parents=True, exist_ok=True)

        self.journal = ChunkLog()
        self.accessor = CollectionAccessor(store, self.journal)
        self.writer = BatchWriter(store, self.accessor, self.journal)
        self.ledger = HistoryLedger(store)
        self.exporter = ExportOrchestrator(self.accessor, self.ledger, str(self.backup_dir), version)
        self.restorer = RestoreOrchestrator(
            store, self.exporter, self.writer, self.accessor, self.ledger, version
        )
        self.estimator = UsageEstimator(self.accessor)

    async def export_full(self, created_by: str) -> ExportResult:
        return await self.exporter.export_full(created_by)

    async def export_windowed(self, period: str, created_by: str) -> ExportResult:
        return await self.exporter.export_windowed(period, created_by)

    async def export_settings(self, created_by: str) -> ExportResult:
        return await self.exporter.export_settings(created_by)

    async def restore(
        self,
        artifact: Union[BackupArtifact, dict, str, bytes],
        mode: Union[RestoreMode, str],
        created_by: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> RestoreResult:
        return await self.restorer.restore(artifact, mode, created_by, on_progress)

    def validate(self, candidate: Any) -> ValidationResult:
        return validate_artifact(candidate, self.version)

    def convert_foreign(self, data: Any, created_by: str = "supabase-import") -> ConversionResult:
        return convert_foreign_export(data, created_by, self.version)

    async def estimate_usage(self) -> UsageEstimate:
        return await self.estimator.estimate()

    async def history(self, limit: int = 20) -> List[HistoryEntry]:
        return await self.ledger.recent(limit)

    # Packaged artifact files

    async def list_backups(self) -> List[BackupFileInfo]:
        """List packaged artifacts, newest first. Unreadable files are skipped."""
        backups = []

        for path in self.backup_dir.glob(f"backup_*{ARTIFACT_SUFFIX}"):
            try:
                data = await load_artifact(path)
                metadata = BackupArtifact.model_validate(data).metadata
                backups.append(BackupFileInfo(
                    file_name=path.name,
                    created_at=metadata.created_at,
                    size_bytes=path.stat().st_size,
                    type=metadata.type,
                    month=metadata.month,
                    total_documents=metadata.total_documents,
                    created_by=metadata.created_by,
                ))
            except Exception as e:
                logger.warning(f"Failed to read backup {path.name}: {e}")

        backups.sort(key=lambda b: b.created_at, reverse=True)
        return backups

    async def get_backup_path(self, file_name: str) -> Optional[Path]:
        """Get path to a packaged artifact, or None if absent or outside the backup dir."""
        path = (self.backup_dir / file_name).resolve()
        if path.parent != self.backup_dir.resolve() or path.suffix != ARTIFACT_SUFFIX:
            return None
        return path if path.is_file() else None

    async def load_backup(self, file_name: str) -> Optional[dict]:
        path = await self.get_backup_path(file_name)
        if path is None:
            return None
        return await load_artifact(path)

    async def delete_backup(self, file_name: str) -> bool:
        """Delete a packaged artifact.

        Returns:
            True if deleted, False if not found
        """
        path = await self.get_backup_path(file_name)
        if path is None:
            return False

        path.unlink()
        logger.info(f"Deleted backup: {file_name}")
        return True


