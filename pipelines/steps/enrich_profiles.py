from __future__ import annotations

import logging

from models import PipelineState
from pipelines.runner import RunContext, finish_run
from ports.notifier import NotifierPort
from services.enrichment_batcher import EnrichmentBatcher
from utils.logging_setup import log_step


logger = logging.getLogger(__name__)


class EnrichProfiles:
    def __init__(self, notifier: NotifierPort, batcher: EnrichmentBatcher) -> None:
        self.notifier = notifier
        self.batcher = batcher

    async def run(self, ctx: RunContext) -> RunContext:
        ctx.state = PipelineState.ENRICHING
        await self.notifier.send_status(f"Enriching {len(ctx.profile_urls)} profiles...", ctx.thread_ref)

        ctx.contacts = await self.batcher.enrich_profiles(ctx.profile_urls)
        ctx.stats.enriched = len(ctx.contacts)
        log_step(logger, "Profiles enriched", ctx.stats.enriched, **ctx.log_extra())

        if not ctx.contacts:
            return await finish_run(ctx, self.notifier, "No verified emails found from enrichment.")
        return ctx
