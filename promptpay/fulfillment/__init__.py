"""Payment-gated image fulfillment."""

from promptpay.fulfillment.orchestrator import FulfillmentSession, FulfillmentSnapshot
from promptpay.fulfillment.registry import FulfillmentRegistry, get_fulfillment_registry, reset_fulfillment_registry
from promptpay.fulfillment.states import InvalidTransitionError, transition

__all__ = [
    "FulfillmentRegistry",
    "FulfillmentSession",
    "FulfillmentSnapshot",
    "InvalidTransitionError",
    "get_fulfillment_registry",
    "reset_fulfillment_registry",
    "transition",
]
