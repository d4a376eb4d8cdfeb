"""Best-effort conversion of a raw row export from a relational store."""

import json
from typing import Any, Dict, List, Optional

from ..exceptions import EmptyConversion, MalformedArtifact
from ..registry import BACKUP_VERSION, COLLECTIONS
from .._utils import generate_foreign_doc_id, logger
from .accessor import DOC_ID_FIELD
from .models import BackupArtifact, BackupType, ConversionResult

ROW_CONTAINER_KEYS = ("rows", "data", "records", "firebase_backup_raw", "firebaseBackupRaw", "result")


def _first(row: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if row.get(key) is not None:
            return row[key]
    return None


def resolve_rows(data: Any) -> Optional[List[Any]]:
    """Locate the row array in a foreign export, or None if the shape is unknown."""
    if isinstance(data, list):
        return data
    if not isinstance(data, dict):
        return None
    for key in ROW_CONTAINER_KEYS:
        if isinstance(data.get(key), list):
            return data[key]
    return None


def _parse_row(row: Any):
    if not isinstance(row, dict):
        return None

    name = _first(row, "collection_name", "collectionName")
    if not isinstance(name, str) or not name.strip() or name not in COLLECTIONS:
        return None

    fields = _first(row, "data", "payload", "document")
    if isinstance(fields, str):
        try:
            fields = json.loads(fields)
        except ValueError:
            return None
    if not isinstance(fields, dict):
        return None

    doc_id = _first(row, "doc_id", "docId")
    if not isinstance(doc_id, str) or not doc_id.strip():
        doc_id = generate_foreign_doc_id()

    return name, {DOC_ID_FIELD: doc_id, **fields}


def convert_foreign_export(
    data: Any,
    created_by: str = "supabase-import",
    version: str = BACKUP_VERSION,
) -> ConversionResult:
    """Convert rows of ``(collection name, doc id, payload)`` into a full artifact.

    Rows naming unknown collections or carrying unparsable payloads are
    dropped. The result still has to pass validation before a restore.
    """
    rows = resolve_rows(data)
    if rows is None:
        error = MalformedArtifact(
            "Unknown foreign export format: expected an array of rows or an object holding rows/data"
        )
        return ConversionResult(valid=False, error=str(error))

    collections: Dict[str, List[Dict[str, Any]]] = {}
    dropped = 0
    for row in rows:
        parsed = _parse_row(row)
        if parsed is None:
            dropped += 1
            continue
        name, document = parsed
        collections.setdefault(name, []).append(document)

    if not collections:
        return ConversionResult(valid=False, error=str(EmptyConversion()))

    backup = BackupArtifact.build(BackupType.FULL, collections, created_by, version=version)
    logger.info(
        f"Converted foreign export: {backup.metadata.total_documents} documents "
        f"in {len(collections)} collections ({dropped} rows dropped)"
    )
    return ConversionResult(valid=True, backup=backup)
