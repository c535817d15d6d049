"""Image generation API route."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from promptpay.core.config import get_settings
from promptpay.core.logger import get_logger
from promptpay.generation.base import (
    FAILURE_CONFIGURATION,
    FAILURE_VALIDATION,
    GenerationFailure,
    PromptValidationError,
)
from promptpay.generation.invoker import GenerationInvoker, get_generation_invoker
from promptpay.generation.prompts import parse_prompt_payload
from promptpay.schemas.generation import ErrorResponse, GenerateResponse


FAILURE_STATUS_CODES = {
    FAILURE_VALIDATION: status.HTTP_400_BAD_REQUEST,
    FAILURE_CONFIGURATION: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

router = APIRouter(prefix="/api", tags=["generation"])
logger = get_logger("promptpay.generation.router")


@dataclass(frozen=True)
class BoundaryResponse:
    status_code: int
    body: Dict[str, Any]


def _error(status_code: int, message: str) -> BoundaryResponse:
    return BoundaryResponse(status_code=status_code, body=ErrorResponse(error=message).model_dump())


async def handle_generate_request(raw_body: bytes, *, invoker: GenerationInvoker) -> BoundaryResponse:
    """Validate a raw request body, generate once and map the outcome to a status."""

    settings = get_settings()
    try:
        prompt = parse_prompt_payload(raw_body, max_length=settings.max_prompt_length)
    except PromptValidationError as exc:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    result = await invoker.generate(prompt)
    if isinstance(result, GenerationFailure):
        status_code = FAILURE_STATUS_CODES.get(result.kind, status.HTTP_502_BAD_GATEWAY)
        logger.info("generate_request_failed", kind=result.kind, status_code=status_code)
        return _error(status_code, result.message)

    response = GenerateResponse(image_url=result.url, prompt=prompt, note=settings.generation_note)
    return BoundaryResponse(status_code=status.HTTP_200_OK, body=response.model_dump(by_alias=True))


@router.post("/generate")
async def generate_image(
    request: Request,
    invoker: GenerationInvoker = Depends(get_generation_invoker),
) -> JSONResponse:
    result = await handle_generate_request(await request.body(), invoker=invoker)
    return JSONResponse(status_code=result.status_code, content=result.body)
