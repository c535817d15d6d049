"""Contracts and result types for image generation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Union


FAILURE_VALIDATION = "validation_error"
FAILURE_CONFIGURATION = "configuration_error"
FAILURE_PROVIDER = "provider_error"


class PromptValidationError(ValueError):
    """Raised when a prompt is missing, blank or too long."""


class ConfigurationError(RuntimeError):
    """Raised when the generation provider credential is not configured."""


class ProviderError(RuntimeError):
    """Raised when the generation provider returns no usable image."""


@dataclass(frozen=True)
class ImageReference:
    """Canonical image reference: a network URL or a data URI."""

    url: str


@dataclass(frozen=True)
class GenerationFailure:
    kind: str
    message: str


GenerationResult = Union[ImageReference, GenerationFailure]


class ImagesResource(Protocol):
    async def generate(self, **kwargs: Any) -> Any:
        raise NotImplementedError


class ProviderClient(Protocol):
    """The subset of ``openai.AsyncOpenAI`` the invoker relies on."""

    images: ImagesResource
