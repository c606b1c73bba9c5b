"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from media_director.api.deps import set_core
from media_director.api.main import app

LIGHTHOUSE = "generate an image of a lighthouse at sunset using Flux"


@pytest.fixture
def client(core):
    set_core(core)
    with TestClient(app) as test_client:
        yield test_client
    set_core(None)


def test_root_and_health(client):
    assert client.get("/").json()["service"] == "Media Director API"
    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["capabilities"] == 23


def test_turn(client):
    response = client.post("/v1/sessions/s1/turns", json={"text": LIGHTHOUSE})
    assert response.status_code == 200
    body = response.json()
    assert body["intent"]["category"] == "image"
    assert body["delegation"]["model_id"] == "fal-ai/flux-pro/v1.1-ultra"

    session = client.get("/v1/sessions/s1").json()
    assert len(session["pending_delegations"]) == 1


def test_turn_with_attachment(client):
    response = client.post(
        "/v1/sessions/s1/turns",
        json={"text": "animate this", "attachments": [{"kind": "image", "ref": "https://cdn.test/photo.png"}]},
    )
    body = response.json()
    assert body["intent"]["category"] == "video"
    assert body["delegation"]["model_id"] == "fal-ai/veo3/image-to-video"


def test_authorize_and_execute(client):
    client.post("/v1/sessions/s1/turns", json={"text": LIGHTHOUSE})
    assert client.post("/v1/sessions/s1/execute").status_code == 409

    assert client.post("/v1/sessions/s1/authorize").json()["generation_authorized"] is True
    response = client.post("/v1/sessions/s1/execute")
    assert response.status_code == 200
    assert len(response.json()["completed"]) == 1


def test_reset(client):
    client.post("/v1/sessions/s1/turns", json={"text": LIGHTHOUSE})
    body = client.post("/v1/sessions/s1/reset").json()
    assert body["pending_delegations"] == []


def test_preferences(client):
    ok = client.put("/v1/sessions/s1/preferences", json={"preferences": {"image": "none"}})
    assert ok.status_code == 200
    assert ok.json()["per_category_preference"] == {"image": "none"}

    assert client.put("/v1/sessions/s1/preferences", json={"preferences": {"image": "acme/x"}}).status_code == 404
    assert client.put("/v1/sessions/s1/preferences", json={"preferences": {"hologram": None}}).status_code == 422


def test_director(client):
    assert client.put("/v1/sessions/s1/director", json={"name": "Nobody"}).status_code == 404
    body = client.put("/v1/sessions/s1/director", json={"name": "Wes Anderson"}).json()
    assert body["active_director"] == "Wes Anderson"
    assert client.put("/v1/sessions/s1/director", json={"name": None}).json()["director_mode_enabled"] is False


def test_suggestions(client):
    client.post("/v1/sessions/s1/turns", json={"text": LIGHTHOUSE})
    ok = client.post("/v1/sessions/s1/suggestions/dutch-angle")
    assert ok.status_code == 200
    assert ok.json()["result"]["modified_prompt"].endswith("dutch angle, tilted camera, disorienting perspective")

    assert client.post("/v1/sessions/s1/suggestions/jump-cut").status_code == 404
    incompatible = client.post("/v1/sessions/s1/suggestions/tracking-shot", json={"category": "image"})
    assert incompatible.status_code == 422


def test_capabilities(client):
    voice = client.get("/v1/capabilities", params={"category": "voice"}).json()
    assert [c["id"] for c in voice] == ["fal-ai/elevenlabs/tts/turbo-v2.5"]

    flux = client.get("/v1/capabilities/fal-ai/flux-pro/v1.1-ultra")
    assert flux.status_code == 200
    assert flux.json()["efficiency"] == "high"
    assert client.get("/v1/capabilities/acme/missing").status_code == 404


def test_directors(client):
    assert len(client.get("/v1/directors").json()) == 21
    assert "Silent" in client.get("/v1/directors/genres").json()
    assert client.get("/v1/directors/Christopher Nolan").json()["command_phrase"].startswith("shot on IMAX")
    assert client.get("/v1/directors/Nobody").status_code == 404


def test_content_filter_stats(client):
    client.post("/v1/sessions/s1/turns", json={"text": "generate an image of a creepy house"})
    stats = client.get("/v1/content-filter/stats").json()
    assert stats["total_generations"] == 1
    assert stats["most_filtered_terms"] == [{"term": "creepy", "count": 1}]
    assert len(client.get("/v1/content-filter/entries").json()) == 1
