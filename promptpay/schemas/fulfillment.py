"""Schemas for fulfillment session endpoints."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class FulfillmentSessionResponse(BaseModel):
    session_id: str
    checkout_id: str
    prompt: str
    phase: str
    payment_verified: bool
    generating: bool
    image_url: Optional[str] = None
    error: Optional[str] = None
    history: List[str]
