"""Image generation: provider client cache, invoker and result types."""

from promptpay.generation.base import (
    ConfigurationError,
    GenerationFailure,
    GenerationResult,
    ImageReference,
    PromptValidationError,
    ProviderError,
)
from promptpay.generation.client_cache import (
    ProviderClientCache,
    get_provider_client_cache,
    reset_provider_client_cache,
)
from promptpay.generation.invoker import GenerationInvoker, get_generation_invoker, reset_generation_invoker

__all__ = [
    "ConfigurationError",
    "GenerationFailure",
    "GenerationInvoker",
    "GenerationResult",
    "ImageReference",
    "PromptValidationError",
    "ProviderClientCache",
    "ProviderError",
    "get_generation_invoker",
    "get_provider_client_cache",
    "reset_generation_invoker",
    "reset_provider_client_cache",
]
