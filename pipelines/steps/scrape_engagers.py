from __future__ import annotations

import logging

from models import PipelineState
from pipelines.runner import RunContext, finish_run
from ports.notifier import NotifierPort
from ports.scraper import ScraperPort
from services.engager_extractor import extract_profile_urls
from utils.logging_setup import log_step


logger = logging.getLogger(__name__)


class ScrapeEngagers:
    def __init__(self, notifier: NotifierPort, scraper: ScraperPort) -> None:
        self.notifier = notifier
        self.scraper = scraper

    async def run(self, ctx: RunContext) -> RunContext:
        ctx.state = PipelineState.SCRAPING
        await self.notifier.send_status("Scraping LinkedIn post engagers...", ctx.thread_ref)

        records = await self.scraper.get_post_engagers(ctx.trigger.post_url)
        ctx.profile_urls = extract_profile_urls(records)
        ctx.stats.engagers = len(ctx.profile_urls)
        log_step(
            logger, "Engagers found", ctx.stats.engagers,
            **ctx.log_extra(records_scraped=len(records or [])),
        )

        if not ctx.profile_urls:
            return await finish_run(ctx, self.notifier, "No engagers found for this post.")
        return ctx
