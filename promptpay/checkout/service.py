"""Checkout creation for prompt purchases."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlencode

from promptpay.checkout.providers import CheckoutOrder, CheckoutProvider, CheckoutSession
from promptpay.core.config import Settings, get_settings
from promptpay.core.logger import get_logger
from promptpay.core.metrics import record_checkout_created


ORDER_TYPE_IMAGE_GENERATION = "image_generation"

logger = get_logger("promptpay.checkout")


def build_success_url(prompt: str, *, settings: Optional[Settings] = None) -> str:
    settings = settings or get_settings()
    base = settings.app_public_base_url.strip().rstrip("/")
    return f"{base}/success?{urlencode({'prompt': prompt})}"


def build_checkout_order(prompt: str, *, settings: Optional[Settings] = None) -> CheckoutOrder:
    """Describe the single-item order that pays for one image from ``prompt``."""

    settings = settings or get_settings()
    return CheckoutOrder(
        title=settings.checkout_title,
        description=prompt,
        amount=settings.checkout_amount,
        currency=settings.checkout_currency,
        success_url=build_success_url(prompt, settings=settings),
        required_customer_fields=settings.required_customer_fields,
        metadata={
            "type": ORDER_TYPE_IMAGE_GENERATION,
            "prompt": prompt,
        },
    )


def create_checkout_for_prompt(prompt: str, *, provider: CheckoutProvider) -> CheckoutSession:
    order = build_checkout_order(prompt)
    session = provider.create_checkout(order)
    record_checkout_created(provider=provider.provider_name)
    logger.info(
        "checkout_created",
        provider=provider.provider_name,
        checkout_id=session.checkout_id,
        amount=order.amount,
        currency=order.currency,
    )
    return session
