"""Provider contracts for checkout backends."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol
from urllib.parse import urlencode


PAYMENT_STATUS_PENDING = "pending"
PAYMENT_STATUS_PAID = "paid"
PAYMENT_STATUS_REJECTED = "rejected"

PAYMENT_STATUSES = {PAYMENT_STATUS_PENDING, PAYMENT_STATUS_PAID, PAYMENT_STATUS_REJECTED}

# Query parameter hosted checkouts append to the success URL on redirect.
CHECKOUT_ID_PARAM = "checkout-id"


class CheckoutProviderError(RuntimeError):
    """Raised when a checkout provider cannot create or report an order."""


@dataclass(frozen=True)
class CheckoutOrder:
    title: str
    description: str
    amount: int
    currency: str
    success_url: str
    required_customer_fields: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "amount": self.amount,
            "currency": self.currency,
            "description": self.description,
            "metadata": dict(self.metadata),
            "successUrl": self.success_url,
            "requiredCustomerFields": list(self.required_customer_fields),
        }


@dataclass(frozen=True)
class CheckoutSession:
    checkout_id: str
    checkout_url: str


@dataclass(frozen=True)
class PaymentStatusResult:
    status: str
    metadata: Dict[str, Any] = field(default_factory=dict)


def normalize_payment_status(value: Any) -> str:
    normalized = str(value or "").strip().lower()
    if normalized in PAYMENT_STATUSES:
        return normalized
    return PAYMENT_STATUS_PENDING


def with_checkout_id(url: str, checkout_id: str) -> str:
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{urlencode({CHECKOUT_ID_PARAM: checkout_id})}"


class CheckoutProvider(Protocol):
    provider_name: str

    def create_checkout(self, order: CheckoutOrder) -> CheckoutSession:
        raise NotImplementedError

    def get_payment_status(self, checkout_id: str) -> PaymentStatusResult:
        raise NotImplementedError
