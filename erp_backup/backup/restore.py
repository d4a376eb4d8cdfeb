"""Restore state machine: validate, snapshot, replay, sweep, record."""

import asyncio
import inspect
import math
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from ..base import BaseDocumentStore
from ..exceptions import ArtifactValidationError, RestoreInProgress
from ..registry import BACKUP_VERSION, COLLECTIONS
from .._utils import file_timestamp, logger
from .accessor import CollectionAccessor
from .exporter import ExportOrchestrator
from .history import HistoryLedger
from .models import BackupArtifact, HistoryAction, HistoryEntry, RestoreMode, RestoreResult
from .validator import check_artifact
from .writer import BatchWriter

ProgressCallback = Callable[[str, int], Union[None, Awaitable[None]]]

SAFETY_SUFFIX = " (auto-before-restore)"

# Advisory locks keyed by store identity; one restore per store at a time
_store_locks: Dict[str, asyncio.Lock] = {}


def _lock_for(identity: str) -> asyncio.Lock:
    lock = _store_locks.get(identity)
    if lock is None:
        lock = _store_locks[identity] = asyncio.Lock()
    return lock


class RestoreState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SAFETY_SNAPSHOTTING = "safety_snapshotting"
    REPLAYING = "replaying"
    SWEEPING_UNLISTED = "sweeping_unlisted"
    LOGGING_HISTORY = "logging_history"
    DONE = "done"
    FAILED = "failed"


def replay_percent(index: int, total: int) -> int:
    """Progress for the ``index``-th collection, spread linearly over 10..90."""
    if total <= 0:
        return 10
    return 10 + math.floor(index / total * 80 + 0.5)


class RestoreOrchestrator:
    """Replay an artifact into the store under a restore mode.

    The run is linear: VALIDATING, SAFETY_SNAPSHOTTING, REPLAYING,
    SWEEPING_UNLISTED (full reset only), LOGGING_HISTORY, DONE. Any failure
    moves to FAILED and stops. Written chunks are not rolled back; the
    safety snapshot taken before the first write is the recovery path.
    """

    def __init__(
        self,
        store: BaseDocumentStore,
        exporter: ExportOrchestrator,
        writer: BatchWriter,
        accessor: CollectionAccessor,
        ledger: HistoryLedger,
        version: str = BACKUP_VERSION,
    ):
        self.store = store
        self.exporter = exporter
        self.writer = writer
        self.accessor = accessor
        self.ledger = ledger
        self.version = version
        self.state = RestoreState.IDLE

    @property
    def journal(self):
        return self.writer.journal

    async def restore(
        self,
        artifact: Any,
        mode: Union[RestoreMode, str],
        created_by: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> RestoreResult:
        """Restore ``artifact`` and report the outcome; never raises for store errors."""
        lock = _lock_for(self.store.identity)
        if lock.locked():
            error = RestoreInProgress(self.store.identity)
            logger.warning(str(error))
            return RestoreResult(success=False, error=str(error), restored=0)

        async with lock:
            return await self._run(artifact, mode, created_by, on_progress)

    async def _run(self, artifact, mode, created_by, on_progress) -> RestoreResult:
        self.journal.reset()
        self.state = RestoreState.IDLE

        try:
            mode = RestoreMode(mode)
        except ValueError:
            return self._fail(f"Unknown restore mode: {mode}", 0)

        self.state = RestoreState.VALIDATING
        try:
            await self._report(on_progress, "validating backup", 2)
            backup = BackupArtifact.model_validate(check_artifact(artifact, self.version))
        except ArtifactValidationError as e:
            return self._fail(str(e), 0)
        except Exception as e:
            return self._fail(str(e), 0)

        restored = 0
        current = None
        try:
            self.state = RestoreState.SAFETY_SNAPSHOTTING
            await self._report(on_progress, "creating safety backup before restore", 5)
            await self.exporter.export_full(f"{created_by}{SAFETY_SUFFIX}")

            self.state = RestoreState.REPLAYING
            names = list(backup.collections.keys())
            for index, name in enumerate(names):
                if mode != RestoreMode.FULL_RESET and name not in COLLECTIONS:
                    continue

                current = name
                await self._report(on_progress, f"restoring {name}", replay_percent(index, len(names)))

                documents = backup.documents(name)
                if documents:
                    await self.writer.write(name, documents, mode)
                    restored += len(documents)
                elif mode.is_destructive:
                    await self.accessor.clear(name)

            if mode == RestoreMode.FULL_RESET:
                self.state = RestoreState.SWEEPING_UNLISTED
                await self._report(on_progress, "clearing collections not in backup", 92)
                for name in COLLECTIONS:
                    if name not in backup.collections:
                        current = name
                        await self.accessor.clear(name)

            current = None
            self.state = RestoreState.LOGGING_HISTORY
            await self._report(on_progress, "saving restore history", 95)
            await self.ledger.append(HistoryEntry(
                type=backup.metadata.type,
                mode=mode,
                action=HistoryAction.IMPORT,
                file_name=f"restore_{mode.value}_{file_timestamp()}",
                total_documents=restored,
                collections_included=names,
                created_by=created_by,
            ))

            self.state = RestoreState.DONE
            await self._report(on_progress, "done", 100)
        except Exception as e:
            if current is not None:
                logger.warning(
                    f"Restore stopped in {current}: "
                    f"{self.journal.committed_count(current)} documents written, "
                    f"{self.journal.committed_count(current, 'delete')} deleted before the failure"
                )
            return self._fail(str(e) or type(e).__name__, restored)

        logger.info(f"Restore complete ({mode.value}): {restored} documents by {created_by}")
        return RestoreResult(success=True, restored=restored)

    def _fail(self, error: str, restored: int) -> RestoreResult:
        failed_in = self.state
        self.state = RestoreState.FAILED
        logger.error(f"Restore failed during {failed_in.value}: {error} ({restored} documents already restored)")
        return RestoreResult(success=False, error=error, restored=restored)

    async def _report(self, on_progress: Optional[ProgressCallback], step: str, percent: int) -> None:
        if on_progress is None:
            return
        result = on_progress(step, percent)
        if inspect.isawaitable(result):
            await result
