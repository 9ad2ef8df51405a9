from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from models import DeliverySummary, EnrichedContact, PipelineState, PipelineTrigger, RunStatistics
from utils.logging_setup import init_logging


@dataclass
class RunContext:
    trigger: PipelineTrigger
    thread_ref: Optional[str] = None
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    state: PipelineState = PipelineState.IDLE
    profile_urls: List[str] = field(default_factory=list)
    contacts: List[EnrichedContact] = field(default_factory=list)
    delivery: Optional[DeliverySummary] = None
    stats: RunStatistics = field(default_factory=RunStatistics)

    def log_extra(self, **extra) -> dict:
        payload = {"run_id": self.run_id, "status": self.state.value}
        payload.update(extra)
        return payload


class Step(Protocol):
    async def run(self, ctx: RunContext) -> RunContext:
        ...


class Pipeline:
    def __init__(self, steps: List[Step]):
        self.steps = steps

    async def run(self, ctx: RunContext) -> RunContext:
        # Make logging idempotent for any direct runner use
        init_logging()
        for step in self.steps:
            ctx = await step.run(ctx)
            if ctx.state.is_terminal:
                break
        if not ctx.state.is_terminal:
            ctx.state = PipelineState.DONE
        return ctx


async def finish_run(ctx: RunContext, notifier, message: Optional[str] = None) -> RunContext:
    """Move the run to DONE, optionally posting a status line before the summary."""
    if message:
        await notifier.send_status(message, ctx.thread_ref)
    await notifier.send_summary(ctx.stats, ctx.thread_ref)
    ctx.state = PipelineState.DONE
    return ctx
