from __future__ import annotations

import json

from conftest import ScriptedCheckoutProvider
from fastapi.testclient import TestClient
import httpx
import pytest

import promptpay.api.main as api_main
from promptpay.checkout.providers import (
    CheckoutProviderError,
    HttpCheckoutProvider,
    MockCheckoutProvider,
    get_checkout_provider,
)
from promptpay.checkout.service import build_checkout_order
from promptpay.core.config import get_settings


def test_build_checkout_order_describes_single_image_purchase(monkeypatch) -> None:
    monkeypatch.setenv("APP_PUBLIC_BASE_URL", "https://art.example.test/")
    get_settings.cache_clear()

    order = build_checkout_order("a red fox & friends")

    assert order.to_payload() == {
        "title": "AI-Generated Image",
        "amount": 20,
        "currency": "SAT",
        "description": "a red fox & friends",
        "metadata": {"type": "image_generation", "prompt": "a red fox & friends"},
        "successUrl": "https://art.example.test/success?prompt=a+red+fox+%26+friends",
        "requiredCustomerFields": ["email"],
    }


def test_mock_provider_reports_configured_status_with_metadata(monkeypatch) -> None:
    monkeypatch.setenv("APP_PUBLIC_BASE_URL", "https://art.example.test")
    get_settings.cache_clear()
    provider = MockCheckoutProvider(status="paid")
    session = provider.create_checkout(build_checkout_order("a red fox"))

    assert session.checkout_url == (
        f"https://art.example.test/success?prompt=a+red+fox&checkout-id={session.checkout_id}"
    )
    status = provider.get_payment_status(session.checkout_id)
    assert status.status == "paid"
    assert status.metadata["prompt"] == "a red fox"

    provider.set_status(session.checkout_id, "rejected")
    assert provider.get_payment_status(session.checkout_id).status == "rejected"

    with pytest.raises(CheckoutProviderError, match="checkout_not_found"):
        provider.get_payment_status("unknown")


def _http_provider(handler) -> HttpCheckoutProvider:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpCheckoutProvider(base_url="https://checkout.example.test/v1/", api_key="ck_test", client=client)


def test_http_provider_creates_checkout() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"id": "chk_42", "checkoutUrl": "https://pay.example.test/chk_42"})

    session = _http_provider(handler).create_checkout(build_checkout_order("a red fox"))

    assert session.checkout_id == "chk_42"
    assert session.checkout_url == "https://pay.example.test/chk_42"
    assert seen["method"] == "POST"
    assert seen["url"] == "https://checkout.example.test/v1/checkouts"
    assert seen["auth"] == "Bearer ck_test"
    assert seen["body"]["amount"] == 20
    assert seen["body"]["metadata"]["prompt"] == "a red fox"


def test_http_provider_surfaces_error_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"error": {"message": "Amount below minimum"}})

    with pytest.raises(CheckoutProviderError, match="Amount below minimum"):
        _http_provider(handler).create_checkout(build_checkout_order("a red fox"))


def test_http_provider_normalizes_payment_status() -> None:
    statuses = iter(["PAID", "expired", "rejected"])

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v1/checkouts/chk_42"
        return httpx.Response(200, json={"status": next(statuses), "metadata": {"prompt": "a red fox"}})

    provider = _http_provider(handler)

    first = provider.get_payment_status("chk_42")
    assert first.status == "paid"
    assert first.metadata == {"prompt": "a red fox"}
    assert provider.get_payment_status("chk_42").status == "pending"
    assert provider.get_payment_status("chk_42").status == "rejected"


def test_http_provider_wraps_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(CheckoutProviderError, match="checkout_request_failed"):
        _http_provider(handler).get_payment_status("chk_42")


@pytest.fixture
def checkout_client():
    def _client(provider) -> TestClient:
        api_main.app.dependency_overrides[get_checkout_provider] = lambda: provider
        return TestClient(api_main.app)

    yield _client
    api_main.app.dependency_overrides.clear()


def test_checkout_endpoint_returns_checkout_url(checkout_client) -> None:
    provider = ScriptedCheckoutProvider()
    client = checkout_client(provider)

    response = client.post("/checkout", json={"prompt": "  a red fox "})

    assert response.status_code == 200
    assert response.json() == {
        "checkoutUrl": "https://pay.example.test/checkout/chk_test_1",
        "checkoutId": "chk_test_1",
    }
    assert provider.orders[0].description == "a red fox"


def test_checkout_endpoint_rejects_blank_prompt(checkout_client) -> None:
    provider = ScriptedCheckoutProvider()
    client = checkout_client(provider)

    response = client.post("/checkout", json={"prompt": "   "})

    assert response.status_code == 400
    assert response.json() == {"error": "Prompt is required."}
    assert provider.orders == []


def test_checkout_endpoint_maps_provider_error_to_502(checkout_client) -> None:
    client = checkout_client(ScriptedCheckoutProvider(error="Checkout service unavailable"))

    response = client.post("/checkout", json={"prompt": "a red fox"})

    assert response.status_code == 502
    assert response.json() == {"error": "Checkout service unavailable"}
