"""Fulfillment session API routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Response, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, RedirectResponse

from promptpay.checkout.providers import CHECKOUT_ID_PARAM, CheckoutProvider, get_checkout_provider
from promptpay.core.config import get_settings
from promptpay.fulfillment.orchestrator import FulfillmentSession
from promptpay.fulfillment.registry import FulfillmentRegistry, get_fulfillment_registry
from promptpay.fulfillment.service import resolve_prompt, start_fulfillment_session
from promptpay.generation.base import PromptValidationError
from promptpay.generation.invoker import GenerationInvoker, get_generation_invoker
from promptpay.generation.prompts import normalize_prompt
from promptpay.schemas.fulfillment import FulfillmentSessionResponse
from promptpay.schemas.generation import ErrorResponse


START_PATH = "/"

router = APIRouter(tags=["fulfillment"])


def _session_response(session: FulfillmentSession) -> FulfillmentSessionResponse:
    snapshot = session.snapshot()
    return FulfillmentSessionResponse(
        session_id=snapshot.session_id,
        checkout_id=snapshot.checkout_id,
        prompt=snapshot.prompt,
        phase=snapshot.phase,
        payment_verified=snapshot.payment_verified,
        generating=snapshot.generating,
        image_url=snapshot.image_url,
        error=snapshot.error,
        history=snapshot.history,
    )


def _get_session_or_404(registry: FulfillmentRegistry, session_id: str) -> FulfillmentSession:
    session = registry.get(session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="fulfillment_session_not_found")
    return session


def _noop_redirect() -> None:
    return None


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@router.get("/success")
async def checkout_success(
    background_tasks: BackgroundTasks,
    prompt: Optional[str] = None,
    checkout_id: Optional[str] = None,
    redirect_checkout_id: Optional[str] = Query(default=None, alias=CHECKOUT_ID_PARAM),
    provider: CheckoutProvider = Depends(get_checkout_provider),
    invoker: GenerationInvoker = Depends(get_generation_invoker),
    registry: FulfillmentRegistry = Depends(get_fulfillment_registry),
):
    normalized_checkout_id = (checkout_id or redirect_checkout_id or "").strip()
    resolved_prompt = await run_in_threadpool(
        resolve_prompt,
        prompt,
        checkout_id=normalized_checkout_id,
        provider=provider,
    )
    if not resolved_prompt:
        return RedirectResponse(url=START_PATH, status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    try:
        resolved_prompt = normalize_prompt(resolved_prompt, max_length=get_settings().max_prompt_length)
    except PromptValidationError as exc:
        return _error_response(status.HTTP_400_BAD_REQUEST, str(exc))

    if not normalized_checkout_id:
        return _error_response(status.HTTP_400_BAD_REQUEST, "checkout_id is required.")

    session = start_fulfillment_session(
        prompt=resolved_prompt,
        checkout_id=normalized_checkout_id,
        provider=provider,
        invoker=invoker,
        registry=registry,
        redirect_to_start=_noop_redirect,
    )
    background_tasks.add_task(session.run)
    return JSONResponse(
        status_code=status.HTTP_202_ACCEPTED,
        content=_session_response(session).model_dump(),
    )


@router.get("/fulfillment/{session_id}", response_model=FulfillmentSessionResponse)
def get_fulfillment_session(
    session_id: str,
    registry: FulfillmentRegistry = Depends(get_fulfillment_registry),
) -> FulfillmentSessionResponse:
    return _session_response(_get_session_or_404(registry, session_id))


@router.delete("/fulfillment/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def abandon_fulfillment_session(
    session_id: str,
    registry: FulfillmentRegistry = Depends(get_fulfillment_registry),
) -> Response:
    _get_session_or_404(registry, session_id)
    registry.discard(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
