"""Tests for the backup REST API."""

import json

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from erp_backup.backup import BackupManager
from tests.utils import MemoryDocumentStore, make_artifact, make_docs


@pytest.fixture
def api_store():
    store = MemoryDocumentStore(namespace="api", global_config={"max_batch_size": 10})
    store.seed("products", make_docs(3))
    store.seed("roles", {"admin": {"permissions": ["all"]}})
    return store


@pytest.fixture
def test_app(api_store, tmp_path):
    """Create test FastAPI app bound to an in-memory store."""
    app = FastAPI()

    from erp_backup.api.routers import backup, health, jobs

    app.state.backup_manager = BackupManager(api_store, str(tmp_path / "backups"))
    app.state.redis_client = None

    app.include_router(jobs.router, prefix="/api/v1")
    app.include_router(backup.router, prefix="/api/v1")
    app.include_router(health.router, prefix="/api/v1")

    return app


@pytest.fixture
def client(test_app):
    return TestClient(test_app)


def test_export_full(client: TestClient):
    response = client.post("/api/v1/backup/export/full", params={"created_by": "admin"})

    assert response.status_code == 200
    data = response.json()
    assert data["type"] == "full"
    assert data["total_documents"] == 4
    assert data["created_by"] == "admin"
    assert data["file_name"].startswith("backup_full_")


def test_export_windowed_validates_month(client: TestClient, api_store):
    api_store.seed("work_orders", {"w1": {"date": "2026-02-03"}, "w2": {"date": "2026-03-01"}})

    response = client.post("/api/v1/backup/export/windowed", params={"month": "2026-02"})
    assert response.status_code == 200
    assert response.json()["month"] == "2026-02"
    assert response.json()["total_documents"] == 1

    assert client.post("/api/v1/backup/export/windowed", params={"month": "2026-13"}).status_code == 422


def test_export_store_unavailable(client: TestClient, api_store):
    api_store.unavailable = True

    response = client.post("/api/v1/backup/export/settings")

    assert response.status_code == 503
    assert "memory" in response.json()["detail"]


def test_list_download_delete(client: TestClient):
    file_name = client.post("/api/v1/backup/export/settings").json()["file_name"]

    listing = client.get("/api/v1/backup/files").json()
    assert [b["file_name"] for b in listing] == [file_name]

    download = client.get(f"/api/v1/backup/files/{file_name}/download")
    assert download.status_code == 200
    assert download.headers["content-type"].startswith("application/json")
    assert json.loads(download.content)["metadata"]["type"] == "settings"

    assert client.delete(f"/api/v1/backup/files/{file_name}").status_code == 200
    assert client.delete(f"/api/v1/backup/files/{file_name}").status_code == 404
    assert client.get(f"/api/v1/backup/files/{file_name}/download").status_code == 404


def test_validate(client: TestClient):
    ok = client.post("/api/v1/backup/validate", json=make_artifact({"products": []}))
    assert ok.json() == {"valid": True, "error": None, "code": None}

    bad = client.post("/api/v1/backup/validate", json=make_artifact({"ghosts": []}))
    assert bad.json()["valid"] is False
    assert bad.json()["code"] == "UnknownCollections"
    assert bad.json()["error"] == "Unknown collections: ghosts"


def test_convert(client: TestClient):
    rows = [{"collection_name": "roles", "doc_id": "r1", "data": {"name": "viewer"}}]

    response = client.post("/api/v1/backup/convert", json={"rows": rows})

    data = response.json()
    assert data["valid"] is True
    assert data["backup"]["metadata"]["totalDocuments"] == 1
    assert data["backup"]["collections"]["roles"] == [{"_docId": "r1", "name": "viewer"}]


def test_restore_runs_in_background(client: TestClient, api_store):
    artifact = make_artifact({"products": [{"_docId": "p9", "name": "Washer"}]})

    response = client.post(
        "/api/v1/backup/restore",
        params={"mode": "replace", "created_by": "admin"},
        files={"file": ("backup.json", json.dumps(artifact), "application/json")},
    )

    assert response.status_code == 200
    job = response.json()
    assert job["job_type"] == "restore"
    assert job["status"] == "pending"
    assert job["metadata"]["mode"] == "replace"
    assert api_store.docs("products") == {"p9": {"name": "Washer"}}


def test_restore_rejects_invalid_upload(client: TestClient, api_store):
    bad_version = make_artifact({"products": [{"_docId": "p9"}]}, version="1.0.0")

    response = client.post(
        "/api/v1/backup/restore",
        files={"file": ("backup.json", json.dumps(bad_version), "application/json")},
    )
    assert response.status_code == 400
    assert "1.0.0" in response.json()["detail"]

    response = client.post(
        "/api/v1/backup/restore",
        files={"file": ("backup.json", b"not json", "application/json")},
    )
    assert response.status_code == 400
    assert api_store.commits == []


def test_restore_rejects_structurally_invalid_upload(client: TestClient, api_store):
    artifact = make_artifact({"products": [{"_docId": "p9"}]})
    artifact["metadata"]["type"] = "custom"

    response = client.post(
        "/api/v1/backup/restore",
        files={"file": ("backup.json", json.dumps(artifact), "application/json")},
    )

    assert response.status_code == 400
    assert response.json()["detail"].startswith("Invalid backup structure")
    assert api_store.commits == []


def test_history_and_usage(client: TestClient):
    client.post("/api/v1/backup/export/full", params={"created_by": "admin"})

    history = client.get("/api/v1/backup/history", params={"limit": 5}).json()
    assert len(history) == 1
    assert history[0]["action"] == "export"
    assert history[0]["createdBy"] == "admin"

    usage = client.get("/api/v1/backup/usage").json()
    assert usage["totalDocuments"] == 4
    assert usage["documentCounts"]["products"] == 3


def test_health(client: TestClient, api_store):
    assert client.get("/api/v1/health").json()["status"] == "healthy"
    assert client.get("/api/v1/health/live").json() == {"status": "alive"}
    assert client.get("/api/v1/health/ready").status_code == 200


def test_jobs_without_redis(client: TestClient):
    assert client.get("/api/v1/jobs").json() == []
    assert client.get("/api/v1/jobs/unknown").status_code == 404


def test_create_app_routes():
    from erp_backup.api.app import create_app

    paths = create_app().openapi()["paths"]

    assert "/api/v1/backup/restore" in paths
    assert "/api/v1/backup/export/windowed" in paths
    assert "/api/v1/health" in paths
