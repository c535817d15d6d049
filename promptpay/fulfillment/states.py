"""Fulfillment state machine: states, events and the transition function.

One event is consumed at a time. Progress is forward-only:

    awaiting_payment -> verifying -> generating -> ready
                            |             |
                            v             v
                    payment_rejected  generation_failed

``payment_rejected`` and ``generation_failed`` are terminal error exits.
Once payment is verified the machine never returns to
``awaiting_payment``. A finished session may re-enter ``verifying`` only
when regeneration is explicitly allowed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union


PHASE_AWAITING_PAYMENT = "awaiting_payment"
PHASE_VERIFYING = "verifying"
PHASE_PAYMENT_REJECTED = "payment_rejected"
PHASE_GENERATING = "generating"
PHASE_READY = "ready"
PHASE_GENERATION_FAILED = "generation_failed"

TERMINAL_PHASES = {PHASE_PAYMENT_REJECTED, PHASE_READY, PHASE_GENERATION_FAILED}
PAYMENT_VERIFIED_PHASES = {PHASE_GENERATING, PHASE_READY, PHASE_GENERATION_FAILED}


class InvalidTransitionError(ValueError):
    """Raised when an event does not apply to the current state."""


@dataclass(frozen=True)
class AwaitingPayment:
    phase: ClassVar[str] = PHASE_AWAITING_PAYMENT


@dataclass(frozen=True)
class Verifying:
    phase: ClassVar[str] = PHASE_VERIFYING


@dataclass(frozen=True)
class PaymentRejected:
    reason: str
    phase: ClassVar[str] = PHASE_PAYMENT_REJECTED


@dataclass(frozen=True)
class Generating:
    phase: ClassVar[str] = PHASE_GENERATING


@dataclass(frozen=True)
class Ready:
    image_url: str
    phase: ClassVar[str] = PHASE_READY


@dataclass(frozen=True)
class GenerationFailed:
    message: str
    phase: ClassVar[str] = PHASE_GENERATION_FAILED


FulfillmentState = Union[AwaitingPayment, Verifying, PaymentRejected, Generating, Ready, GenerationFailed]


@dataclass(frozen=True)
class CheckoutCompleted:
    prompt: str


@dataclass(frozen=True)
class PaymentConfirmed:
    pass


@dataclass(frozen=True)
class PaymentDeclined:
    reason: str


@dataclass(frozen=True)
class GenerationSucceeded:
    image_url: str


@dataclass(frozen=True)
class GenerationErrored:
    message: str


FulfillmentEvent = Union[CheckoutCompleted, PaymentConfirmed, PaymentDeclined, GenerationSucceeded, GenerationErrored]


def transition(
    state: FulfillmentState,
    event: FulfillmentEvent,
    *,
    allow_regeneration: bool = False,
) -> FulfillmentState:
    if isinstance(event, CheckoutCompleted):
        if not event.prompt or not event.prompt.strip():
            raise InvalidTransitionError("checkout_completed_without_prompt")
        if isinstance(state, AwaitingPayment):
            return Verifying()
        if allow_regeneration and isinstance(state, (Ready, GenerationFailed)):
            return Verifying()
    elif isinstance(state, Verifying):
        if isinstance(event, PaymentConfirmed):
            return Generating()
        if isinstance(event, PaymentDeclined):
            return PaymentRejected(reason=event.reason)
    elif isinstance(state, Generating):
        if isinstance(event, GenerationSucceeded):
            return Ready(image_url=event.image_url)
        if isinstance(event, GenerationErrored):
            return GenerationFailed(message=event.message)

    raise InvalidTransitionError(f"{type(event).__name__} not allowed in phase {state.phase}")
