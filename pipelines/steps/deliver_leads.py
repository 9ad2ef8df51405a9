from __future__ import annotations

import logging

from models import PipelineState
from pipelines.runner import RunContext, finish_run
from ports.notifier import NotifierPort
from services.delivery_submitter import DeliverySubmitter
from utils.logging_setup import log_step


logger = logging.getLogger(__name__)


class DeliverLeads:
    def __init__(self, notifier: NotifierPort, submitter: DeliverySubmitter) -> None:
        self.notifier = notifier
        self.submitter = submitter

    async def run(self, ctx: RunContext) -> RunContext:
        ctx.state = PipelineState.DELIVERING
        await self.notifier.send_status(f"Pushing {len(ctx.contacts)} leads to the campaign...", ctx.thread_ref)

        ctx.delivery = await self.submitter.submit(ctx.contacts)
        ctx.stats.pushed = ctx.delivery.added
        ctx.stats.failed = ctx.delivery.failed
        log_step(logger, "Leads pushed to campaign", ctx.stats.pushed, **ctx.log_extra(failed=ctx.stats.failed))

        # Partial delivery failure is reported in the summary, not raised
        return await finish_run(ctx, self.notifier)
