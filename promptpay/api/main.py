"""FastAPI application entrypoint for PromptPay."""

from __future__ import annotations

from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from promptpay.checkout.router import router as checkout_router
from promptpay.core.config import get_settings
from promptpay.core.logger import bind_request_context, clear_request_context, get_logger
from promptpay.core.metrics import record_http_request, render_prometheus_metrics
from promptpay.fulfillment.router import router as fulfillment_router
from promptpay.generation.client_cache import get_provider_client_cache
from promptpay.generation.router import router as generation_router


settings = get_settings()
logger = get_logger("promptpay.api")

app = FastAPI(title=settings.app_name, version=settings.app_version)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    started_at = perf_counter()
    request_id = request.headers.get("x-request-id", str(uuid4()))
    bind_request_context(request_id=request_id)

    status_code = 500
    try:
        response = await call_next(request)
        status_code = int(response.status_code)
    finally:
        duration = perf_counter() - started_at
        if settings.metrics_enabled:
            record_http_request(
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_seconds=duration,
            )
        clear_request_context()

    response.headers["x-request-id"] = request_id
    return response


@app.on_event("startup")
def on_startup() -> None:
    logger.info(
        "application_startup",
        env=settings.env,
        version=settings.app_version,
        checkout_provider=settings.checkout_provider,
        image_model=settings.image_model,
        metrics_enabled=settings.metrics_enabled,
        image_credential_configured=bool(settings.openai_api_key.strip()),
    )


@app.get("/health")
def health() -> dict[str, object]:
    return {
        "status": "ok",
        "env": settings.env,
        "services": {
            "image_provider": {"client_initialized": get_provider_client_cache().is_initialized},
            "checkout_provider": {"name": settings.checkout_provider},
        },
    }


@app.get("/version")
def version() -> dict[str, str]:
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "env": settings.env,
    }


@app.get("/metrics")
def metrics() -> PlainTextResponse:
    if not settings.metrics_enabled:
        return PlainTextResponse("metrics disabled\n", status_code=404)

    payload = render_prometheus_metrics(
        app_name=settings.app_name,
        app_version=settings.app_version,
        env=settings.env,
    )
    return PlainTextResponse(
        payload,
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )


app.include_router(generation_router)
app.include_router(checkout_router)
app.include_router(fulfillment_router)
