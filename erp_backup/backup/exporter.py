"""Assemble, package and record backup artifacts."""

import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..registry import BACKUP_VERSION, COLLECTIONS, DATE_FIELDS, SETTINGS_COLLECTIONS, WINDOWED_COLLECTIONS
from .._utils import logger
from .accessor import CollectionAccessor
from .history import HistoryLedger
from .models import BackupArtifact, BackupType, ExportResult, HistoryAction, HistoryEntry
from .utils import ARTIFACT_SUFFIX, build_file_name, save_artifact

PERIOD_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def in_period(document: Dict[str, Any], period: str) -> bool:
    """Whether a document belongs to ``period`` (``YYYY-MM``).

    The first truthy date-like field decides. Documents without a string
    date are kept.
    """
    value = next((document[f] for f in DATE_FIELDS if document.get(f)), None)
    if isinstance(value, str):
        return value.startswith(period)
    return True


class ExportOrchestrator:
    """Produce full, windowed and settings-only artifacts.

    All three follow one template: read every target collection, filter,
    count, assemble metadata, write the file, then append a history entry.
    Nothing is written to disk until every read has succeeded.
    """

    def __init__(
        self,
        accessor: CollectionAccessor,
        ledger: HistoryLedger,
        backup_dir: str = "./backups",
        version: str = BACKUP_VERSION,
    ):
        self.accessor = accessor
        self.ledger = ledger
        self.backup_dir = Path(backup_dir)
        self.version = version

    async def export_full(self, created_by: str) -> ExportResult:
        return await self._export(BackupType.FULL, COLLECTIONS, created_by)

    async def export_windowed(self, period: str, created_by: str) -> ExportResult:
        if not PERIOD_PATTERN.match(period or ""):
            raise ValueError(f"period must look like YYYY-MM, got {period!r}")
        return await self._export(
            BackupType.WINDOWED,
            WINDOWED_COLLECTIONS,
            created_by,
            month=period,
            keep=lambda doc: in_period(doc, period),
        )

    async def export_settings(self, created_by: str) -> ExportResult:
        return await self._export(BackupType.SETTINGS, SETTINGS_COLLECTIONS, created_by)

    async def build_artifact(
        self,
        backup_type: BackupType,
        targets: Sequence[str],
        created_by: str,
        month: Optional[str] = None,
        keep: Optional[Callable[[Dict[str, Any]], bool]] = None,
    ) -> BackupArtifact:
        collections: Dict[str, List[Dict[str, Any]]] = {}
        for name in targets:
            documents = await self.accessor.read_all(name)
            if keep is not None:
                documents = [doc for doc in documents if keep(doc)]
            collections[name] = documents

        return BackupArtifact.build(
            backup_type, collections, created_by, month=month, version=self.version
        )

    async def _export(
        self,
        backup_type: BackupType,
        targets: Sequence[str],
        created_by: str,
        month: Optional[str] = None,
        keep: Optional[Callable[[Dict[str, Any]], bool]] = None,
    ) -> ExportResult:
        logger.info(f"Starting {backup_type.value} export for {created_by}")

        artifact = await self.build_artifact(backup_type, targets, created_by, month=month, keep=keep)

        file_name = self._unique_name(build_file_name(backup_type.value, month))
        path = self.backup_dir / file_name
        size = await save_artifact(artifact.to_dict(), path)

        metadata = artifact.metadata
        await self.ledger.append(HistoryEntry(
            type=backup_type,
            action=HistoryAction.EXPORT,
            file_name=file_name,
            total_documents=metadata.total_documents,
            collections_included=metadata.collections_included,
            created_by=created_by,
            month=month,
        ))

        logger.info(
            f"Export complete: {file_name} ({metadata.total_documents} documents, {size:,} bytes)"
        )
        return ExportResult(artifact=artifact, file_name=file_name, path=path, size_bytes=size)

    def _unique_name(self, file_name: str) -> str:
        # Timestamps have one-second resolution; never overwrite an earlier file
        stem = file_name[: -len(ARTIFACT_SUFFIX)]
        candidate, counter = file_name, 1
        while (self.backup_dir / candidate).exists():
            candidate = f"{stem}_{counter}{ARTIFACT_SUFFIX}"
            counter += 1
        return candidate
