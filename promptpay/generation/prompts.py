"""Prompt normalization shared by the HTTP entry points."""

from __future__ import annotations

import json
from typing import Any

from promptpay.generation.base import PromptValidationError


INVALID_JSON_MESSAGE = "Invalid JSON payload."
PROMPT_REQUIRED_MESSAGE = "Prompt is required."


def normalize_prompt(value: Any, *, max_length: int) -> str:
    if not isinstance(value, str):
        raise PromptValidationError(PROMPT_REQUIRED_MESSAGE)
    prompt = value.strip()
    if not prompt:
        raise PromptValidationError(PROMPT_REQUIRED_MESSAGE)
    if len(prompt) > max_length:
        raise PromptValidationError(f"Prompt must be at most {max_length} characters.")
    return prompt


def parse_prompt_payload(raw_body: bytes, *, max_length: int) -> str:
    """Extract the trimmed prompt from a ``{"prompt": ...}`` JSON body."""

    try:
        payload = json.loads(raw_body.decode("utf-8"))
    except ValueError as exc:
        raise PromptValidationError(INVALID_JSON_MESSAGE) from exc
    if not isinstance(payload, dict):
        raise PromptValidationError(INVALID_JSON_MESSAGE)
    return normalize_prompt(payload.get("prompt"), max_length=max_length)
