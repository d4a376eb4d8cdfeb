"""Backup/restore engine components."""

from .manager import BackupManager
from .models import (
    BackupArtifact,
    BackupType,
    HistoryEntry,
    RestoreMode,
    RestoreResult,
    ValidationResult,
)
from .restore import RestoreOrchestrator, RestoreState
from .validator import validate_artifact
from .foreign import convert_foreign_export

__all__ = [
    "BackupManager",
    "BackupArtifact",
    "BackupType",
    "HistoryEntry",
    "RestoreMode",
    "RestoreResult",
    "ValidationResult",
    "RestoreOrchestrator",
    "RestoreState",
    "validate_artifact",
    "convert_foreign_export",
]
