"""Lazily constructed, process-wide image provider client."""

from __future__ import annotations

from functools import lru_cache
from threading import Lock
from typing import Callable, Optional

from openai import AsyncOpenAI

from promptpay.core.config import Settings, get_settings
from promptpay.core.logger import get_logger
from promptpay.generation.base import ConfigurationError, ProviderClient


MISSING_CREDENTIAL_MESSAGE = "missing credential"

logger = get_logger("promptpay.generation.client_cache")


def _read_credential() -> str:
    # Fresh read so a credential added after startup is picked up.
    return Settings().openai_api_key


def _build_openai_client(api_key: str) -> ProviderClient:
    settings = get_settings()
    return AsyncOpenAI(
        api_key=api_key,
        base_url=settings.image_api_base_url,
        timeout=float(settings.image_timeout_seconds),
        max_retries=0,
    )


class ProviderClientCache:
    """Memoize one provider client; construction happens at most once.

    Failures are never cached: while the credential is absent every call
    re-reads it and raises ``ConfigurationError``.
    """

    def __init__(
        self,
        *,
        credential_loader: Callable[[], str] = _read_credential,
        client_factory: Callable[[str], ProviderClient] = _build_openai_client,
    ) -> None:
        self._credential_loader = credential_loader
        self._client_factory = client_factory
        self._lock = Lock()
        self._client: Optional[ProviderClient] = None

    @property
    def is_initialized(self) -> bool:
        return self._client is not None

    def get_client(self) -> ProviderClient:
        client = self._client
        if client is not None:
            return client

        with self._lock:
            if self._client is not None:
                return self._client

            api_key = (self._credential_loader() or "").strip()
            if not api_key:
                logger.warning("image_provider_credential_missing")
                raise ConfigurationError(MISSING_CREDENTIAL_MESSAGE)

            self._client = self._client_factory(api_key)
            logger.info("image_provider_client_created")
            return self._client

    def reset(self) -> None:
        with self._lock:
            self._client = None


@lru_cache(maxsize=1)
def get_provider_client_cache() -> ProviderClientCache:
    return ProviderClientCache()


def reset_provider_client_cache() -> None:
    get_provider_client_cache.cache_clear()
