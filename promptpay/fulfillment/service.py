"""Fulfillment session creation and prompt resolution."""

from __future__ import annotations

from typing import Callable, Optional
import uuid

from promptpay.checkout.providers import CheckoutProvider, CheckoutProviderError
from promptpay.core.config import get_settings
from promptpay.core.logger import get_logger
from promptpay.fulfillment.orchestrator import FulfillmentSession
from promptpay.fulfillment.registry import FulfillmentRegistry
from promptpay.generation.invoker import GenerationInvoker


logger = get_logger("promptpay.fulfillment.service")


def resolve_prompt(
    query_prompt: Optional[str],
    *,
    checkout_id: Optional[str],
    provider: CheckoutProvider,
) -> str:
    """Prompt from the redirect parameters, else from the order metadata."""

    prompt = (query_prompt or "").strip()
    if prompt or not checkout_id:
        return prompt

    try:
        status = provider.get_payment_status(checkout_id)
    except CheckoutProviderError as exc:
        logger.warning("fulfillment_prompt_lookup_failed", checkout_id=checkout_id, error=str(exc))
        return ""
    metadata_prompt = status.metadata.get("prompt")
    if not isinstance(metadata_prompt, str):
        return ""
    return metadata_prompt.strip()


def start_fulfillment_session(
    *,
    prompt: str,
    checkout_id: str,
    provider: CheckoutProvider,
    invoker: GenerationInvoker,
    registry: FulfillmentRegistry,
    redirect_to_start: Callable[[], None],
) -> FulfillmentSession:
    settings = get_settings()
    session = FulfillmentSession(
        session_id=str(uuid.uuid4()),
        prompt=prompt,
        checkout_id=checkout_id,
        checkout_provider=provider,
        invoker=invoker,
        redirect_to_start=redirect_to_start,
        poll_interval_seconds=settings.payment_poll_interval_seconds,
        max_checks=settings.payment_poll_max_checks,
        allow_regeneration=settings.fulfillment_allow_regeneration,
    )
    registry.register(session)
    logger.info("fulfillment_session_started", session_id=session.session_id, checkout_id=checkout_id)
    return session
