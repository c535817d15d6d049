"""Schemas for the image generation endpoint."""

from __future__ import annotations

from pydantic import BaseModel, Field


class GenerateResponse(BaseModel):
    image_url: str = Field(serialization_alias="imageUrl")
    prompt: str
    note: str


class ErrorResponse(BaseModel):
    error: str
