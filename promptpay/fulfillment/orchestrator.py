"""Fulfillment session: payment confirmation, then generation, then result."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from promptpay.checkout.providers import (
    PAYMENT_STATUS_PAID,
    PAYMENT_STATUS_REJECTED,
    CheckoutProvider,
    CheckoutProviderError,
)
from promptpay.core.logger import get_logger, session_log_context
from promptpay.core.metrics import record_fulfillment_outcome
from promptpay.fulfillment.states import (
    PAYMENT_VERIFIED_PHASES,
    PHASE_GENERATING,
    TERMINAL_PHASES,
    AwaitingPayment,
    CheckoutCompleted,
    FulfillmentEvent,
    FulfillmentState,
    GenerationErrored,
    GenerationFailed,
    GenerationSucceeded,
    PaymentConfirmed,
    PaymentDeclined,
    PaymentRejected,
    Ready,
    transition,
)
from promptpay.generation.base import GenerationFailure
from promptpay.generation.invoker import GenerationInvoker


REASON_PAYMENT_REJECTED = "payment_rejected"
REASON_PAYMENT_UNRESOLVED = "payment_unresolved"

logger = get_logger("promptpay.fulfillment")


@dataclass(frozen=True)
class FulfillmentSnapshot:
    session_id: str
    checkout_id: str
    prompt: str
    phase: str
    payment_verified: bool
    generating: bool
    image_url: Optional[str]
    error: Optional[str]
    history: List[str]


class FulfillmentSession:
    """Drive one viewing session through the fulfillment state machine.

    The session owns its state exclusively. ``run`` confirms payment first
    and only then calls the generation invoker, exactly once. Abandoning the
    session does not cancel an in-flight provider call; its result is
    discarded instead.
    """

    def __init__(
        self,
        *,
        session_id: str,
        prompt: str,
        checkout_id: str,
        checkout_provider: CheckoutProvider,
        invoker: GenerationInvoker,
        redirect_to_start: Callable[[], None],
        poll_interval_seconds: float = 2.0,
        max_checks: int = 1,
        allow_regeneration: bool = False,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.session_id = session_id
        self.prompt = (prompt or "").strip()
        self.checkout_id = checkout_id
        self._checkout_provider = checkout_provider
        self._invoker = invoker
        self._redirect_to_start = redirect_to_start
        self._poll_interval_seconds = poll_interval_seconds
        self._max_checks = max(1, max_checks)
        self._allow_regeneration = allow_regeneration
        self._sleep = sleep
        self._state: FulfillmentState = AwaitingPayment()
        self._history: List[str] = [self._state.phase]
        self._running = False
        self._abandoned = False

    @property
    def state(self) -> FulfillmentState:
        return self._state

    @property
    def history(self) -> List[str]:
        return list(self._history)

    @property
    def payment_verified(self) -> bool:
        return self._state.phase in PAYMENT_VERIFIED_PHASES

    @property
    def generating(self) -> bool:
        return self._state.phase == PHASE_GENERATING

    @property
    def abandoned(self) -> bool:
        return self._abandoned

    def apply(self, event: FulfillmentEvent) -> FulfillmentState:
        previous = self._state
        self._state = transition(previous, event, allow_regeneration=self._allow_regeneration)
        self._history.append(self._state.phase)
        logger.info(
            "fulfillment_transition",
            session_id=self.session_id,
            from_phase=previous.phase,
            to_phase=self._state.phase,
        )
        if self._state.phase in TERMINAL_PHASES:
            record_fulfillment_outcome(phase=self._state.phase)
        return self._state

    def abandon(self) -> None:
        self._abandoned = True
        logger.info("fulfillment_abandoned", session_id=self.session_id, phase=self._state.phase)

    async def run(self) -> FulfillmentState:
        if not self.prompt:
            logger.info("fulfillment_redirect_to_start", session_id=self.session_id)
            self._redirect_to_start()
            return self._state
        if self._running or self._abandoned:
            return self._state
        can_regenerate = self._allow_regeneration and isinstance(self._state, (Ready, GenerationFailed))
        if not isinstance(self._state, AwaitingPayment) and not can_regenerate:
            logger.info("fulfillment_reverify_ignored", session_id=self.session_id, phase=self._state.phase)
            return self._state

        self._running = True
        try:
            with session_log_context(self.session_id):
                await self._verify_and_generate()
            return self._state
        finally:
            self._running = False

    async def _verify_and_generate(self) -> None:
        self.apply(CheckoutCompleted(prompt=self.prompt))
        decision = await self._resolve_payment()
        if decision is None:
            return
        self.apply(decision)
        if isinstance(decision, PaymentDeclined):
            return
        await self._generate()

    async def _resolve_payment(self) -> Optional[FulfillmentEvent]:
        for attempt in range(1, self._max_checks + 1):
            if self._abandoned:
                return None
            try:
                result = await asyncio.to_thread(self._checkout_provider.get_payment_status, self.checkout_id)
            except CheckoutProviderError as exc:
                logger.warning(
                    "fulfillment_payment_status_failed",
                    checkout_id=self.checkout_id,
                    error=str(exc),
                )
                return PaymentDeclined(reason=str(exc))

            if result.status == PAYMENT_STATUS_PAID:
                return PaymentConfirmed()
            if result.status == PAYMENT_STATUS_REJECTED:
                return PaymentDeclined(reason=REASON_PAYMENT_REJECTED)
            if attempt < self._max_checks:
                await self._sleep(self._poll_interval_seconds)

        if self._abandoned:
            return None
        return PaymentDeclined(reason=REASON_PAYMENT_UNRESOLVED)

    async def _generate(self) -> None:
        result = await self._invoker.generate(self.prompt)
        if self._abandoned:
            logger.info("fulfillment_result_discarded")
            return
        if isinstance(result, GenerationFailure):
            self.apply(GenerationErrored(message=result.message))
        else:
            self.apply(GenerationSucceeded(image_url=result.url))

    def snapshot(self) -> FulfillmentSnapshot:
        state = self._state
        image_url = state.image_url if isinstance(state, Ready) else None
        error: Optional[str] = None
        if isinstance(state, GenerationFailed):
            error = state.message
        elif isinstance(state, PaymentRejected):
            error = state.reason
        return FulfillmentSnapshot(
            session_id=self.session_id,
            checkout_id=self.checkout_id,
            prompt=self.prompt,
            phase=state.phase,
            payment_verified=self.payment_verified,
            generating=self.generating,
            image_url=image_url,
            error=error,
            history=self.history,
        )
