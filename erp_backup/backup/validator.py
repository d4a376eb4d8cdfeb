"""Structural and semantic checks on a candidate artifact before any mutation."""

import json
from typing import Any, Dict, Union

from pydantic import ValidationError

from ..exceptions import (
    ArtifactValidationError,
    IncompatibleVersion,
    MalformedArtifact,
    MissingCollections,
    MissingVersion,
    UnknownCollections,
)
from ..registry import BACKUP_VERSION, COLLECTIONS, major_version
from .models import BackupArtifact, ValidationResult


def load_candidate(candidate: Union[str, bytes, Dict[str, Any], BackupArtifact]) -> Dict[str, Any]:
    """Deserialize a candidate into a plain mapping.

    Raises:
        MalformedArtifact: the candidate is not a JSON object with a metadata mapping
    """
    if isinstance(candidate, BackupArtifact):
        return candidate.to_dict()
    if isinstance(candidate, (str, bytes)):
        try:
            candidate = json.loads(candidate)
        except (ValueError, UnicodeDecodeError) as e:
            raise MalformedArtifact(f"Invalid file, not a JSON object: {e}") from e
    if not isinstance(candidate, dict):
        raise MalformedArtifact("Invalid file, not a JSON object")
    if not isinstance(candidate.get("metadata"), dict):
        raise MalformedArtifact("File has no metadata")
    return candidate


def check_artifact(candidate: Any, current_version: str = BACKUP_VERSION) -> Dict[str, Any]:
    """Run every check in order, raising the first failure.

    Returns the candidate as a plain mapping.
    """
    data = load_candidate(candidate)
    metadata = data["metadata"]

    version = metadata.get("version")
    if not version:
        raise MissingVersion()

    if major_version(version) != major_version(current_version):
        raise IncompatibleVersion(str(version), current_version)

    collections = data.get("collections")
    if not isinstance(collections, dict):
        raise MissingCollections()

    unknown = [name for name in collections if name not in COLLECTIONS]
    if unknown:
        raise UnknownCollections(unknown)

    try:
        BackupArtifact.model_validate(data)
    except ValidationError as e:
        raise MalformedArtifact(f"Invalid backup structure: {e}") from e

    return data


def validate_artifact(candidate: Any, current_version: str = BACKUP_VERSION) -> ValidationResult:
    """Validate a candidate artifact without touching any store."""
    try:
        check_artifact(candidate, current_version)
    except ArtifactValidationError as e:
        return ValidationResult(valid=False, error=str(e), code=type(e).__name__)
    return ValidationResult(valid=True)
