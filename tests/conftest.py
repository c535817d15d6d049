from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

from promptpay.checkout.providers import (
    CheckoutOrder,
    CheckoutProviderError,
    CheckoutSession,
    PaymentStatusResult,
    reset_checkout_provider_cache,
)
from promptpay.core.config import get_settings
from promptpay.core.metrics import reset_metrics_for_tests
from promptpay.fulfillment.registry import reset_fulfillment_registry
from promptpay.generation.base import GenerationResult
from promptpay.generation.client_cache import ProviderClientCache, reset_provider_client_cache
from promptpay.generation.invoker import GenerationInvoker, reset_generation_invoker


class FakeImages:
    def __init__(self, response: Any = None, error: Optional[Exception] = None) -> None:
        self.response = response
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def generate(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


class FakeProviderClient:
    def __init__(self, images: FakeImages) -> None:
        self.images = images


def image_response(*, url: Optional[str] = None, b64_json: Optional[str] = None) -> SimpleNamespace:
    return SimpleNamespace(data=[SimpleNamespace(url=url, b64_json=b64_json)])


class RecordingInvoker:
    def __init__(self, result: GenerationResult) -> None:
        self.result = result
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> GenerationResult:
        self.prompts.append(prompt)
        return self.result


class ScriptedCheckoutProvider:
    provider_name = "scripted"

    def __init__(
        self,
        statuses: Optional[List[str]] = None,
        *,
        metadata: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
    ) -> None:
        self._statuses = list(statuses or ["paid"])
        self._metadata = metadata or {}
        self._error = error
        self.status_calls: List[str] = []
        self.orders: List[CheckoutOrder] = []

    def create_checkout(self, order: CheckoutOrder) -> CheckoutSession:
        if self._error is not None:
            raise CheckoutProviderError(self._error)
        self.orders.append(order)
        return CheckoutSession(checkout_id="chk_test_1", checkout_url="https://pay.example.test/checkout/chk_test_1")

    def get_payment_status(self, checkout_id: str) -> PaymentStatusResult:
        self.status_calls.append(checkout_id)
        if self._error is not None:
            raise CheckoutProviderError(self._error)
        index = min(len(self.status_calls), len(self._statuses)) - 1
        return PaymentStatusResult(status=self._statuses[index], metadata=dict(self._metadata))


def _reset_caches() -> None:
    get_settings.cache_clear()
    reset_provider_client_cache()
    reset_generation_invoker()
    reset_checkout_provider_cache()
    reset_fulfillment_registry()
    reset_metrics_for_tests()


@pytest.fixture(autouse=True)
def isolated_caches():
    _reset_caches()
    yield
    _reset_caches()


@pytest.fixture
def fake_images() -> FakeImages:
    return FakeImages(response=image_response(url="https://images.example.test/fox.png"))


@pytest.fixture
def make_invoker():
    def _make(images: FakeImages, *, credential: str = "sk-test") -> GenerationInvoker:
        cache = ProviderClientCache(
            credential_loader=lambda: credential,
            client_factory=lambda api_key: FakeProviderClient(images),
        )
        return GenerationInvoker(cache, model="gpt-image-1", size="1024x1024")

    return _make


@pytest.fixture
def recording_invoker():
    return RecordingInvoker


@pytest.fixture
def scripted_checkout():
    return ScriptedCheckoutProvider
