"""Checkout provider integrations."""

from promptpay.checkout.providers.base import (
    CHECKOUT_ID_PARAM,
    PAYMENT_STATUS_PAID,
    PAYMENT_STATUS_PENDING,
    PAYMENT_STATUS_REJECTED,
    CheckoutOrder,
    CheckoutProvider,
    CheckoutProviderError,
    CheckoutSession,
    PaymentStatusResult,
    with_checkout_id,
)
from promptpay.checkout.providers.factory import get_checkout_provider, reset_checkout_provider_cache
from promptpay.checkout.providers.http_provider import HttpCheckoutProvider
from promptpay.checkout.providers.mock_provider import MockCheckoutProvider

__all__ = [
    "CHECKOUT_ID_PARAM",
    "PAYMENT_STATUS_PAID",
    "PAYMENT_STATUS_PENDING",
    "PAYMENT_STATUS_REJECTED",
    "CheckoutOrder",
    "CheckoutProvider",
    "CheckoutProviderError",
    "CheckoutSession",
    "HttpCheckoutProvider",
    "MockCheckoutProvider",
    "PaymentStatusResult",
    "get_checkout_provider",
    "reset_checkout_provider_cache",
    "with_checkout_id",
]
