"""Utility functions for packaging backup artifacts."""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from .._utils import file_timestamp, logger

ARTIFACT_SUFFIX = ".json"


def build_file_name(backup_type: str, period: Optional[str] = None, timestamp: Optional[str] = None) -> str:
    """Build an artifact file name.

    Returns:
        File name in format: backup_<type>[_<period>]_<YYYY-MM-DDTHH-MM-SS>.json
    """
    parts = ["backup", backup_type]
    if period:
        parts.append(period)
    parts.append(timestamp or file_timestamp())
    return "_".join(parts) + ARTIFACT_SUFFIX


def serialize_artifact(data: Dict[str, Any]) -> bytes:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str).encode("utf-8")


async def save_artifact(data: Dict[str, Any], output_path: Path) -> int:
    """Write artifact JSON to file.

    The payload is fully serialized before the file is opened, so a
    serialization error never leaves a partial file behind.

    Returns:
        Size of the written file in bytes
    """
    payload = serialize_artifact(data)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = output_path.with_name(output_path.name + ".part")
    try:
        with open(tmp_path, "wb") as f:
            f.write(payload)
        tmp_path.replace(output_path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise

    logger.debug(f"Artifact saved: {output_path} ({len(payload):,} bytes)")
    return len(payload)


async def load_artifact(artifact_path: Path) -> Dict[str, Any]:
    """Load artifact JSON from file."""
    with open(artifact_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    logger.debug(f"Artifact loaded: {artifact_path}")
    return data


def estimate_json_bytes(value: Any) -> int:
    """Approximate serialized size of ``value`` in bytes."""
    text = json.dumps(value, ensure_ascii=False, default=str)
    try:
        return len(text.encode("utf-8"))
    except UnicodeEncodeError:
        return len(text)
