"""Pydantic schemas for checkout endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class CheckoutResponse(BaseModel):
    checkout_url: str = Field(serialization_alias="checkoutUrl")
    checkout_id: str = Field(serialization_alias="checkoutId")
