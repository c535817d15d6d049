"""Factory to resolve the active checkout provider."""

from __future__ import annotations

from functools import lru_cache

from promptpay.checkout.providers.base import CheckoutProvider
from promptpay.checkout.providers.http_provider import HttpCheckoutProvider
from promptpay.checkout.providers.mock_provider import MockCheckoutProvider
from promptpay.core.config import get_settings


@lru_cache(maxsize=1)
def get_checkout_provider() -> CheckoutProvider:
    settings = get_settings()
    provider = settings.checkout_provider.strip().lower()
    if provider == "http":
        return HttpCheckoutProvider(
            base_url=settings.checkout_api_base_url,
            api_key=settings.checkout_api_key,
            timeout_seconds=settings.checkout_timeout_seconds,
        )
    return MockCheckoutProvider(status=settings.mock_checkout_status)


def reset_checkout_provider_cache() -> None:
    get_checkout_provider.cache_clear()
