"""Data models for backup/restore operations."""

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..registry import BACKUP_VERSION
from .._utils import iso_now, utc_now


class BackupType(str, Enum):
    FULL = "full"
    WINDOWED = "windowed"
    SETTINGS = "settings"


class RestoreMode(str, Enum):
    MERGE = "merge"
    REPLACE = "replace"
    FULL_RESET = "full_reset"

    @property
    def is_destructive(self) -> bool:
        return self is not RestoreMode.MERGE


class HistoryAction(str, Enum):
    EXPORT = "export"
    IMPORT = "import"


def _coerce_backup_type(value: Any) -> Any:
    # Artifacts written by older releases label windowed exports "monthly"
    if value == "monthly":
        return BackupType.WINDOWED
    return value


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ArtifactMetadata(CamelModel):
    """Artifact header; counts always describe what was actually serialized."""

    version: str = BACKUP_VERSION
    created_at: str = Field(default_factory=iso_now, alias="createdAt")
    type: BackupType = BackupType.FULL
    month: Optional[str] = None
    collections_included: List[str] = Field(default_factory=list, alias="collectionsIncluded")
    document_counts: Dict[str, int] = Field(default_factory=dict, alias="documentCounts")
    total_documents: int = Field(default=0, alias="totalDocuments")
    created_by: str = Field(default="", alias="createdBy")

    @field_validator("version", mode="before")
    @classmethod
    def stringify_version(cls, v):
        return str(v)

    @field_validator("type", mode="before")
    @classmethod
    def accept_legacy_type(cls, v):
        return _coerce_backup_type(v)


class BackupArtifact(CamelModel):
    """The portable unit of transport: metadata plus every exported collection."""

    metadata: ArtifactMetadata
    collections: Dict[str, Optional[List[Dict[str, Any]]]]

    @classmethod
    def build(
        cls,
        backup_type: BackupType,
        collections: Dict[str, List[Dict[str, Any]]],
        created_by: str,
        month: Optional[str] = None,
        version: str = BACKUP_VERSION,
    ) -> "BackupArtifact":
        """Assemble an artifact, deriving every count from ``collections``."""
        document_counts = {name: len(docs) for name, docs in collections.items()}
        metadata = ArtifactMetadata(
            version=version,
            type=backup_type,
            month=month if backup_type == BackupType.WINDOWED else None,
            collections_included=list(collections.keys()),
            document_counts=document_counts,
            total_documents=sum(document_counts.values()),
            created_by=created_by,
        )
        return cls(metadata=metadata, collections=collections)

    def documents(self, name: str) -> List[Dict[str, Any]]:
        return self.collections.get(name) or []

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(by_alias=True)
        if data["metadata"].get("month") is None:
            data["metadata"].pop("month", None)
        return data


class HistoryEntry(CamelModel):
    """Immutable audit record of one export or import."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: Optional[str] = None
    type: BackupType
    mode: Optional[RestoreMode] = None
    action: HistoryAction
    file_name: str = Field(alias="fileName")
    total_documents: int = Field(alias="totalDocuments")
    collections_included: List[str] = Field(default_factory=list, alias="collectionsIncluded")
    created_by: str = Field(alias="createdBy")
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    month: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def accept_legacy_type(cls, v):
        return _coerce_backup_type(v)

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # Date-only and zone-less timestamps from older rows are UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class ValidationResult(BaseModel):
    valid: bool
    error: Optional[str] = None
    code: Optional[str] = None


class RestoreResult(BaseModel):
    success: bool
    error: Optional[str] = None
    restored: int = 0


class ConversionResult(BaseModel):
    valid: bool
    backup: Optional[BackupArtifact] = None
    error: Optional[str] = None


class UsageEstimate(CamelModel):
    generated_at: str = Field(alias="generatedAt")
    collections_scanned: int = Field(alias="collectionsScanned")
    total_documents: int = Field(alias="totalDocuments")
    estimated_bytes: int = Field(alias="estimatedBytes")
    document_counts: Dict[str, int] = Field(alias="documentCounts")


class ExportResult(BaseModel):
    """Outcome of a successful export: the artifact and where it was packaged."""

    artifact: BackupArtifact
    file_name: str
    path: Path
    size_bytes: int


class BackupFileInfo(BaseModel):
    """Packaged backup file summary for listings and API responses."""

    file_name: str
    created_at: datetime
    size_bytes: int
    type: BackupType
    month: Optional[str] = None
    total_documents: int
    created_by: str
