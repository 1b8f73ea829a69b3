"""Tests for the mock live API used for local runs."""

import pytest
from fastapi.testclient import TestClient

from tools.mock_live_api import SAMPLE_PREMIUM_EMAIL, MockLiveStore, create_app


@pytest.fixture
def client():
    return TestClient(create_app())


@pytest.fixture
def empty_client():
    return TestClient(create_app(MockLiveStore()))


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_seeded_catalog(client):
    """Test the seed catalog has two VIP-only streams out of four."""
    streams = client.get("/api/streams").json()["streams"]

    assert len(streams) == 4
    assert sorted(s["isVipOnly"] for s in streams) == [False, False, True, True]


def test_create_missing_fields_returns_400(empty_client):
    """Test creation without streamerName is rejected."""
    response = empty_client.post("/api/streams", json={"title": "x", "thumbnail": "y"})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields"}


def test_create_lists_newest_first(empty_client):
    for title in ("first", "second"):
        empty_client.post(
            "/api/streams", json={"title": title, "thumbnail": "t", "streamerName": "s"}
        )

    titles = [s["title"] for s in empty_client.get("/api/streams").json()["streams"]]

    assert titles == ["second", "first"]


def test_update_requires_id(client):
    response = client.put("/api/streams", json={"title": "x"})

    assert response.status_code == 400
    assert response.json()["error"] == "Stream ID is required"


def test_delete_requires_id(client):
    response = client.delete("/api/streams")

    assert response.status_code == 400


def test_premium_check_known_user(client):
    body = client.post("/api/user/premium", json={"email": SAMPLE_PREMIUM_EMAIL}).json()

    assert body["isPremium"] is True
    assert body["user"]["name"] == "Premium Tester"


def test_premium_check_requires_email(client):
    response = client.post("/api/user/premium", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "Email is required"}
