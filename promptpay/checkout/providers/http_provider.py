"""HTTP checkout provider."""

from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from promptpay.checkout.providers.base import (
    CheckoutOrder,
    CheckoutProvider,
    CheckoutProviderError,
    CheckoutSession,
    PaymentStatusResult,
    normalize_payment_status,
)


class HttpCheckoutProvider(CheckoutProvider):
    provider_name = "http"

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str = "",
        timeout_seconds: int = 20,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._base_url = base_url.strip().rstrip("/")
        self._api_key = api_key.strip()
        self._timeout_seconds = max(1, timeout_seconds)
        self._client = client

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _send(self, method: str, path: str, *, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not self._base_url:
            raise CheckoutProviderError("checkout_api_base_url_missing")

        url = f"{self._base_url}{path}"
        try:
            if self._client is not None:
                response = self._client.request(method, url, headers=self._headers(), json=json)
            else:
                with httpx.Client(timeout=self._timeout_seconds) as client:
                    response = client.request(method, url, headers=self._headers(), json=json)
        except httpx.HTTPError as exc:
            raise CheckoutProviderError(f"checkout_request_failed detail={exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code < 200 or response.status_code >= 300:
            raise CheckoutProviderError(self._error_message(body, response))
        if not isinstance(body, dict):
            raise CheckoutProviderError("checkout_invalid_json_response")
        return body

    @staticmethod
    def _error_message(body: Any, response: httpx.Response) -> str:
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and isinstance(error.get("message"), str):
                return error["message"]
            if isinstance(body.get("message"), str):
                return body["message"]
        detail = response.text.strip()
        if len(detail) > 240:
            detail = detail[:240] + "..."
        return f"checkout_request_failed status={response.status_code} detail={detail}"

    def create_checkout(self, order: CheckoutOrder) -> CheckoutSession:
        body = self._send("POST", "/checkouts", json=order.to_payload())
        checkout_id = str(body.get("id") or "").strip()
        checkout_url = str(body.get("checkoutUrl") or body.get("checkout_url") or "").strip()
        if not checkout_url:
            message = body.get("message")
            raise CheckoutProviderError(message if isinstance(message, str) and message else "checkout_missing_url")
        return CheckoutSession(checkout_id=checkout_id, checkout_url=checkout_url)

    def get_payment_status(self, checkout_id: str) -> PaymentStatusResult:
        body = self._send("GET", f"/checkouts/{quote(checkout_id, safe='')}")
        metadata = body.get("metadata")
        return PaymentStatusResult(
            status=normalize_payment_status(body.get("status")),
            metadata=metadata if isinstance(metadata, dict) else {},
        )
