from __future__ import annotations

import json

from conftest import FakeImages, image_response
from fastapi.testclient import TestClient
import pytest

import promptpay.api.main as api_main
from promptpay.generation.invoker import get_generation_invoker


@pytest.fixture
def client_for(make_invoker):
    def _client(images: FakeImages, *, credential: str = "sk-test") -> TestClient:
        invoker = make_invoker(images, credential=credential)
        api_main.app.dependency_overrides[get_generation_invoker] = lambda: invoker
        return TestClient(api_main.app)

    yield _client
    api_main.app.dependency_overrides.clear()


def test_generate_returns_image_and_trimmed_prompt(client_for, fake_images) -> None:
    client = client_for(fake_images)

    response = client.post("/api/generate", json={"prompt": "  a red fox  "})

    assert response.status_code == 200
    payload = response.json()
    assert payload["imageUrl"] == "https://images.example.test/fox.png"
    assert payload["prompt"] == "a red fox"
    assert payload["note"]
    assert len(fake_images.calls) == 1
    assert fake_images.calls[0]["prompt"] == "a red fox"


@pytest.mark.parametrize("prompt", ["", "   ", "\n\t", None])
def test_blank_prompt_returns_400_without_provider_call(client_for, fake_images, prompt) -> None:
    client = client_for(fake_images)

    response = client.post("/api/generate", json={"prompt": prompt})

    assert response.status_code == 400
    assert response.json() == {"error": "Prompt is required."}
    assert fake_images.calls == []


def test_missing_prompt_field_returns_400(client_for, fake_images) -> None:
    client = client_for(fake_images)

    response = client.post("/api/generate", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "Prompt is required."}
    assert fake_images.calls == []


@pytest.mark.parametrize("body", [b"{not json", b"", b"[1, 2]", b'"a red fox"'])
def test_malformed_body_returns_fixed_400(client_for, fake_images, body) -> None:
    client = client_for(fake_images)

    response = client.post("/api/generate", content=body, headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid JSON payload."}
    assert fake_images.calls == []


def test_overlong_prompt_returns_400(client_for, fake_images) -> None:
    client = client_for(fake_images)

    response = client.post("/api/generate", json={"prompt": "x" * 401})

    assert response.status_code == 400
    assert "400 characters" in response.json()["error"]
    assert fake_images.calls == []


def test_prompt_at_length_limit_is_accepted(client_for, fake_images) -> None:
    client = client_for(fake_images)

    response = client.post("/api/generate", json={"prompt": "é" * 400})

    assert response.status_code == 200
    assert len(fake_images.calls) == 1


def test_missing_credential_maps_to_500(client_for, fake_images) -> None:
    client = client_for(fake_images, credential="")

    response = client.post("/api/generate", json={"prompt": "a red fox"})

    assert response.status_code == 500
    assert response.json() == {"error": "missing credential"}
    assert fake_images.calls == []


def test_provider_failure_maps_to_502(client_for) -> None:
    images = FakeImages(error=RuntimeError("upstream timed out"))
    client = client_for(images)

    response = client.post("/api/generate", json={"prompt": "a red fox"})

    assert response.status_code == 502
    assert response.json() == {"error": "upstream timed out"}


def test_provider_without_image_maps_to_502(client_for) -> None:
    client = client_for(FakeImages(response=image_response()))

    response = client.post("/api/generate", json={"prompt": "a red fox"})

    assert response.status_code == 502
    assert response.json() == {"error": "no image returned"}


def test_repeated_requests_generate_fresh_each_time(client_for, fake_images) -> None:
    client = client_for(fake_images)
    body = json.dumps({"prompt": "a red fox"})

    for _ in range(3):
        response = client.post("/api/generate", content=body, headers={"Content-Type": "application/json"})
        assert response.status_code == 200

    assert len(fake_images.calls) == 3
