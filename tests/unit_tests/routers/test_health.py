from fastapi import status
from fastapi.testclient import TestClient


def test_health__local(local_client: TestClient):
    response = local_client.get("/health")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "status": "ok",
        "storage_mode": "local",
        "components": {"api": "ready", "storage": "ready"},
        "ready": True,
    }


def test_health__s3(cloud_client: TestClient):
    response = cloud_client.get("/health")

    assert response.json()["storage_mode"] == "s3"
    assert response.json()["ready"] is True


def test_health__local_public_dir_removed(local_client: TestClient, public_dir):
    public_dir.rmdir()

    response = local_client.get("/health")

    assert response.json()["status"] == "degraded"
    assert response.json()["ready"] is False
