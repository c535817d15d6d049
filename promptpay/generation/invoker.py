"""Single-shot image generation with result normalization."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional, Union

from promptpay.core.config import get_settings
from promptpay.core.logger import get_logger
from promptpay.core.metrics import record_image_generation
from promptpay.generation.base import (
    FAILURE_CONFIGURATION,
    FAILURE_PROVIDER,
    FAILURE_VALIDATION,
    ConfigurationError,
    GenerationFailure,
    GenerationResult,
    ImageReference,
    ProviderError,
)
from promptpay.generation.client_cache import ProviderClientCache, get_provider_client_cache
from promptpay.generation.prompts import PROMPT_REQUIRED_MESSAGE


NO_IMAGE_MESSAGE = "no image returned"

logger = get_logger("promptpay.generation.invoker")


@dataclass(frozen=True)
class DirectUrl:
    url: str


@dataclass(frozen=True)
class InlineImage:
    b64_data: str
    mime_type: str = "image/png"


ProviderImage = Union[DirectUrl, InlineImage]


def _field(item: Any, name: str) -> Optional[str]:
    if isinstance(item, dict):
        value = item.get(name)
    else:
        value = getattr(item, name, None)
    if not isinstance(value, str):
        return None
    return value.strip() or None


def parse_provider_image(response: Any) -> ProviderImage:
    """Resolve the first returned image to one of the two wire shapes.

    A direct URL wins over inline data when both are present.
    """

    data = response.get("data") if isinstance(response, dict) else getattr(response, "data", None)
    first = data[0] if isinstance(data, (list, tuple)) and data else None
    if first is None:
        raise ProviderError(NO_IMAGE_MESSAGE)

    url = _field(first, "url")
    if url:
        return DirectUrl(url=url)
    b64_data = _field(first, "b64_json")
    if b64_data:
        return InlineImage(b64_data=b64_data)
    raise ProviderError(NO_IMAGE_MESSAGE)


def to_image_reference(image: ProviderImage) -> ImageReference:
    if isinstance(image, DirectUrl):
        return ImageReference(url=image.url)
    return ImageReference(url=f"data:{image.mime_type};base64,{image.b64_data}")


class GenerationInvoker:
    """Issue exactly one provider call per ``generate`` and classify the outcome."""

    def __init__(
        self,
        client_cache: ProviderClientCache,
        *,
        model: str,
        size: str,
    ) -> None:
        self._client_cache = client_cache
        self._model = model
        self._size = size

    async def generate(self, prompt: str) -> GenerationResult:
        if not prompt or not prompt.strip():
            return GenerationFailure(kind=FAILURE_VALIDATION, message=PROMPT_REQUIRED_MESSAGE)

        logger.info("image_generation_started", model=self._model, size=self._size, prompt_length=len(prompt))
        try:
            client = self._client_cache.get_client()
            response = await client.images.generate(
                model=self._model,
                prompt=prompt,
                size=self._size,
                n=1,
            )
            reference = to_image_reference(parse_provider_image(response))
        except ConfigurationError as exc:
            logger.error("image_generation_failed", kind=FAILURE_CONFIGURATION, error=str(exc))
            record_image_generation(outcome=FAILURE_CONFIGURATION)
            return GenerationFailure(kind=FAILURE_CONFIGURATION, message=str(exc))
        except Exception as exc:
            message = str(exc) or exc.__class__.__name__
            logger.warning("image_generation_failed", kind=FAILURE_PROVIDER, error=message)
            record_image_generation(outcome=FAILURE_PROVIDER)
            return GenerationFailure(kind=FAILURE_PROVIDER, message=message)

        logger.info("image_generation_succeeded", inline=reference.url.startswith("data:"))
        record_image_generation(outcome="succeeded")
        return reference


@lru_cache(maxsize=1)
def get_generation_invoker() -> GenerationInvoker:
    settings = get_settings()
    return GenerationInvoker(
        get_provider_client_cache(),
        model=settings.image_model,
        size=settings.image_size,
    )


def reset_generation_invoker() -> None:
    get_generation_invoker.cache_clear()
