"""Tests for artifact packaging utilities."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from erp_backup.backup.utils import (
    build_file_name,
    estimate_json_bytes,
    load_artifact,
    save_artifact,
    serialize_artifact,
)


def test_build_file_name():
    assert build_file_name("full", timestamp="2026-03-01T10-20-30") == "backup_full_2026-03-01T10-20-30.json"
    assert (
        build_file_name("windowed", "2026-02", "2026-03-01T10-20-30")
        == "backup_windowed_2026-02_2026-03-01T10-20-30.json"
    )


def test_build_file_name_defaults_to_now():
    name = build_file_name("settings")

    assert name.startswith("backup_settings_")
    assert name.endswith(".json")
    assert ":" not in name


def test_serialize_artifact_keeps_unicode():
    payload = serialize_artifact({"name": "مصنع"})

    assert "مصنع" in payload.decode("utf-8")


@pytest.mark.asyncio
async def test_save_and_load_artifact(tmp_path):
    path = tmp_path / "out" / "backup_full_x.json"
    data = {"metadata": {"version": "2.0.0"}, "collections": {"products": []}}

    size = await save_artifact(data, path)

    assert size == path.stat().st_size
    assert not path.with_name(path.name + ".part").exists()
    assert await load_artifact(path) == data


def test_estimate_json_bytes():
    assert estimate_json_bytes([]) == 2
    assert estimate_json_bytes({"a": "é"}) == len(json.dumps({"a": "é"}, ensure_ascii=False).encode("utf-8"))


@pytest.mark.asyncio
async def test_failed_save_leaves_no_partial_file(tmp_path):
    path = tmp_path / "backup_full_x.json"

    with patch.object(Path, "replace", side_effect=OSError("No space left on device")):
        with pytest.raises(OSError):
            await save_artifact({"collections": {}}, path)

    assert list(tmp_path.iterdir()) == []
