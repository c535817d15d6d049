"""Deterministic in-memory checkout provider for local/dev usage."""

from __future__ import annotations

import hashlib
from threading import Lock
from typing import Dict

from promptpay.checkout.providers.base import (
    CheckoutOrder,
    CheckoutProvider,
    CheckoutProviderError,
    CheckoutSession,
    PaymentStatusResult,
    normalize_payment_status,
    with_checkout_id,
)


class MockCheckoutProvider(CheckoutProvider):
    provider_name = "mock"

    def __init__(self, *, status: str = "paid") -> None:
        self._status = normalize_payment_status(status)
        self._lock = Lock()
        self._orders: Dict[str, CheckoutOrder] = {}
        self._statuses: Dict[str, str] = {}

    def create_checkout(self, order: CheckoutOrder) -> CheckoutSession:
        with self._lock:
            seed_source = f"{order.description}:{order.amount}:{order.currency}:{len(self._orders)}".encode("utf-8")
            checkout_id = hashlib.sha1(seed_source).hexdigest()[:16]
            self._orders[checkout_id] = order
        # No hosted page: the checkout URL is the redirect a paid checkout would make.
        return CheckoutSession(checkout_id=checkout_id, checkout_url=with_checkout_id(order.success_url, checkout_id))

    def set_status(self, checkout_id: str, status: str) -> None:
        with self._lock:
            self._statuses[checkout_id] = normalize_payment_status(status)

    def get_payment_status(self, checkout_id: str) -> PaymentStatusResult:
        with self._lock:
            order = self._orders.get(checkout_id)
            status = self._statuses.get(checkout_id, self._status)
        if order is None:
            raise CheckoutProviderError("checkout_not_found")
        return PaymentStatusResult(status=status, metadata=dict(order.metadata))
