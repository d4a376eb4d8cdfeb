"""Tests for artifact validation."""

import json

import pytest

from erp_backup.backup.models import BackupArtifact, BackupType
from erp_backup.backup.validator import check_artifact, validate_artifact
from erp_backup.exceptions import IncompatibleVersion, MalformedArtifact
from tests.utils import make_artifact


def test_valid_artifact():
    result = validate_artifact(make_artifact({"products": [{"_docId": "p1", "name": "Bolt"}]}))

    assert result.valid is True
    assert result.error is None


def test_unknown_collection_is_named_in_error():
    result = validate_artifact({"metadata": {"version": "2.0.0"}, "collections": {"unknown_x": []}})

    assert result.valid is False
    assert result.code == "UnknownCollections"
    assert "unknown_x" in result.error


def test_lists_every_offender():
    result = validate_artifact({
        "metadata": {"version": "2.0.0"},
        "collections": {"products": [], "ghosts": [], "spirits": []},
    })

    assert "ghosts" in result.error
    assert "spirits" in result.error
    assert "products" not in result.error


@pytest.mark.parametrize("candidate", [None, 42, "not json", [1, 2], {"collections": {}}])
def test_malformed(candidate):
    result = validate_artifact(candidate)

    assert result.valid is False
    assert result.code == "MalformedArtifact"


def test_missing_version():
    result = validate_artifact({"metadata": {"type": "full"}, "collections": {}})

    assert result.valid is False
    assert result.code == "MissingVersion"


def test_empty_metadata_reports_missing_version():
    assert validate_artifact({"metadata": {}, "collections": {}}).code == "MissingVersion"


def test_major_version_gate():
    old = validate_artifact(make_artifact({}, version="1.0.0"), current_version="2.0.0")
    newer_minor = validate_artifact(make_artifact({}, version="2.3.9"), current_version="2.0.0")

    assert old.valid is False
    assert old.code == "IncompatibleVersion"
    assert "1.0.0" in old.error and "2.0.0" in old.error
    assert newer_minor.valid is True


@pytest.mark.parametrize("collections", [None, [], "products"])
def test_missing_collections(collections):
    result = validate_artifact({"metadata": {"version": "2.0.0"}, "collections": collections})

    assert result.valid is False
    assert result.code == "MissingCollections"


def test_accepts_json_text_and_models():
    raw = make_artifact({"roles": [{"_docId": "admin"}]})
    artifact = BackupArtifact.build(BackupType.SETTINGS, {"roles": []}, "tester")

    assert validate_artifact(json.dumps(raw)).valid is True
    assert validate_artifact(json.dumps(raw).encode()).valid is True
    assert validate_artifact(artifact).valid is True


def test_check_artifact_raises_typed_errors():
    with pytest.raises(MalformedArtifact):
        check_artifact("{")
    with pytest.raises(IncompatibleVersion):
        check_artifact(make_artifact({}, version="3.0.0"))


def test_validation_never_touches_candidate():
    raw = make_artifact({"products": [{"_docId": "p1"}]})
    snapshot = json.dumps(raw, sort_keys=True)

    validate_artifact(raw)

    assert json.dumps(raw, sort_keys=True) == snapshot


@pytest.mark.parametrize("metadata_type, documents", [
    ("custom", [{"_docId": "p1"}]),
    ("full", ["not a document", 7]),
])
def test_structurally_invalid_artifact(metadata_type, documents):
    raw = make_artifact({"products": documents})
    raw["metadata"]["type"] = metadata_type

    result = validate_artifact(raw)

    assert result.valid is False
    assert result.code == "MalformedArtifact"
    assert result.error.startswith("Invalid backup structure")


@pytest.mark.asyncio
async def test_validate_and_restore_agree(manager, store):
    raw = make_artifact({"products": [{"_docId": "p1"}]})
    raw["metadata"]["type"] = "custom"

    verdict = manager.validate(raw)
    outcome = await manager.restore(raw, "merge", "admin")

    assert verdict.valid is False
    assert outcome.success is False
    assert outcome.error == verdict.error
    assert store.commits == []
