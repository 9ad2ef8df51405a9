from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from config.settings import Settings, get_settings
from models import PipelineState, PipelineTrigger, RunStatistics
from pipelines.runner import Pipeline, RunContext
from pipelines.steps import DeliverLeads, EnrichProfiles, ScrapeEngagers
from ports.delivery import DeliveryBackendPort
from ports.enricher import EnricherPort
from ports.notifier import NotifierPort
from ports.scraper import ScraperPort
from services.delivery_submitter import DeliverySubmitter
from services.enrichment_batcher import EnrichmentBatcher
from services.notifiers import should_handle_event


logger = logging.getLogger(__name__)


class LeadPipeline:
    """Scrape -> enrich -> deliver for one LinkedIn post, reporting to a chat thread.

    Holds no per-run state: every run gets a fresh RunContext and RunStatistics.
    Runs on the same instance are serialized.
    """

    def __init__(
        self,
        notifier: NotifierPort,
        scraper: ScraperPort,
        enricher: EnricherPort,
        delivery_backend: DeliveryBackendPort,
        *,
        settings: Optional[Settings] = None,
        batcher: Optional[EnrichmentBatcher] = None,
        submitter: Optional[DeliverySubmitter] = None,
    ) -> None:
        settings = settings or get_settings()
        self.notifier = notifier
        self.scraper = scraper
        self.batcher = batcher or EnrichmentBatcher(
            enricher,
            batch_size=settings.enrich_concurrency,
            batch_delay_seconds=settings.enrich_batch_delay_seconds,
            rate_limit_wait_seconds=settings.rate_limit_wait_seconds,
            max_rate_limit_retries=settings.rate_limit_max_retries,
        )
        self.submitter = submitter or DeliverySubmitter(
            delivery_backend,
            pacing_seconds=settings.delivery_pacing_seconds,
        )
        self._run_lock = asyncio.Lock()

    def build_pipeline(self) -> Pipeline:
        return Pipeline([
            ScrapeEngagers(self.notifier, self.scraper),
            EnrichProfiles(self.notifier, self.batcher),
            DeliverLeads(self.notifier, self.submitter),
        ])

    async def run(self, trigger: PipelineTrigger, thread_ref: Optional[str] = None) -> RunStatistics:
        async with self._run_lock:
            ctx = RunContext(trigger=trigger, thread_ref=thread_ref)
            logger.info("Starting pipeline for %s", trigger.post_url, extra=ctx.log_extra(step="start"))
            try:
                ctx = await self.build_pipeline().run(ctx)
            except Exception as exc:
                failed_in = ctx.state.value
                ctx.state = PipelineState.ERRORED
                logger.exception(
                    "Pipeline failed during %s", failed_in,
                    extra=ctx.log_extra(step=failed_in, error=str(exc)),
                )
                await self._report_error(f"Pipeline failed: {exc}", ctx.thread_ref)
                raise
            logger.info(
                "Pipeline completed: engagers=%d enriched=%d pushed=%d failed=%d",
                ctx.stats.engagers, ctx.stats.enriched, ctx.stats.pushed, ctx.stats.failed,
                extra=ctx.log_extra(step="done"),
            )
            return ctx.stats

    async def handle_message(self, text: Optional[str], thread_ref: Optional[str] = None) -> Optional[RunStatistics]:
        trigger = self.notifier.parse_trigger(text)
        if trigger is None:
            logger.debug("Message does not contain a LinkedIn post URL, ignoring")
            return None
        logger.info("Parsed pipeline request for %s", trigger.post_url)
        return await self.run(trigger, thread_ref)

    async def handle_event(self, event: Dict[str, Any], channel_id: Optional[str]) -> Optional[RunStatistics]:
        """Entry point for a chat message event; replies go to the message's thread."""
        if not should_handle_event(event, channel_id):
            return None
        return await self.handle_message(event.get("text"), event.get("ts"))

    async def _report_error(self, text: str, thread_ref: Optional[str]) -> None:
        try:
            await self.notifier.send_error(text, thread_ref)
        except Exception as notify_exc:
            logger.error("Could not deliver error notification: %s", notify_exc, extra={"error": str(notify_exc)})
