"""Checkout API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from promptpay.checkout.providers import CheckoutProvider, CheckoutProviderError, get_checkout_provider
from promptpay.checkout.service import create_checkout_for_prompt
from promptpay.core.config import get_settings
from promptpay.core.logger import get_logger
from promptpay.generation.base import PromptValidationError
from promptpay.generation.prompts import parse_prompt_payload
from promptpay.schemas.checkout import CheckoutResponse
from promptpay.schemas.generation import ErrorResponse


router = APIRouter(tags=["checkout"])
logger = get_logger("promptpay.checkout.router")


@router.post("/checkout")
async def create_checkout(
    request: Request,
    provider: CheckoutProvider = Depends(get_checkout_provider),
) -> JSONResponse:
    raw_body = await request.body()
    try:
        prompt = parse_prompt_payload(raw_body, max_length=get_settings().max_prompt_length)
    except PromptValidationError as exc:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(error=str(exc)).model_dump(),
        )

    try:
        session = await run_in_threadpool(create_checkout_for_prompt, prompt, provider=provider)
    except CheckoutProviderError as exc:
        logger.warning("checkout_create_failed", provider=provider.provider_name, error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content=ErrorResponse(error=str(exc)).model_dump(),
        )

    payload = CheckoutResponse(checkout_url=session.checkout_url, checkout_id=session.checkout_id)
    return JSONResponse(status_code=status.HTTP_200_OK, content=payload.model_dump(by_alias=True))
