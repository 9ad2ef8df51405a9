from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PipelineState(str, Enum):
    IDLE = "idle"
    SCRAPING = "scraping"
    ENRICHING = "enriching"
    DELIVERING = "delivering"
    DONE = "done"
    ERRORED = "errored"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineState.DONE, PipelineState.ERRORED)


class RunStatistics(BaseModel):
    """Per-run counters rendered verbatim in the summary notification."""

    engagers: int = Field(default=0, ge=0)
    enriched: int = Field(default=0, ge=0)
    pushed: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)

    model_config = ConfigDict(validate_assignment=True)
