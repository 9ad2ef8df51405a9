from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


DeliveryMode = Literal["bulk", "individual", "skipped"]


class BulkUploadResult(BaseModel):
    """Counts reported by the campaign backend; None when the response omits them."""

    added: int | None = None
    failed: int | None = None


class DeliveryResult(BaseModel):
    success: bool
    email: str
    error: str | None = None


class DeliverySummary(BaseModel):
    added: int = 0
    failed: int = 0
    mode: DeliveryMode = "skipped"
    results: list[DeliveryResult] = Field(default_factory=list)
