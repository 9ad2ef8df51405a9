from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

from models import EnrichedContact, is_verified_match
from ports.enricher import EnricherPort, RateLimitedError
from utils.logging_setup import log_step


logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


def chunked(items: Sequence[T], size: int) -> List[List[T]]:
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class EnrichmentBatcher:
    """Turns profile URLs into verified contacts in fixed-width concurrent waves.

    Each wave fans out one enrichment call per URL and waits for all of them;
    waves are separated by ``batch_delay_seconds``. A rate-limited URL is
    retried after ``rate_limit_wait_seconds``, at most ``max_rate_limit_retries``
    times. Every other per-URL failure is dropped.
    """

    def __init__(
        self,
        enricher: EnricherPort,
        *,
        batch_size: int = 5,
        batch_delay_seconds: float = 1.0,
        rate_limit_wait_seconds: float = 5.0,
        max_rate_limit_retries: int = 3,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if max_rate_limit_retries < 0:
            raise ValueError("max_rate_limit_retries must be >= 0")
        self.enricher = enricher
        self.batch_size = batch_size
        self.batch_delay_seconds = batch_delay_seconds
        self.rate_limit_wait_seconds = rate_limit_wait_seconds
        self.max_rate_limit_retries = max_rate_limit_retries
        self._sleep = sleep

    async def enrich_one(self, profile_url: str) -> Optional[EnrichedContact]:
        retries = 0
        while True:
            try:
                match = await self.enricher.enrich_one(profile_url)
            except RateLimitedError:
                if retries >= self.max_rate_limit_retries:
                    logger.warning(
                        "Rate limit retries exhausted for %s", profile_url,
                        extra={"step": "enrich", "status": "rate_limited"},
                    )
                    return None
                retries += 1
                logger.warning(
                    "Enrichment rate limit hit, retry %d/%d in %.1fs for %s",
                    retries, self.max_rate_limit_retries, self.rate_limit_wait_seconds, profile_url,
                    extra={"step": "enrich", "status": "rate_limited"},
                )
                await self._sleep(self.rate_limit_wait_seconds)
                continue
            except Exception as exc:
                logger.debug("Failed to enrich profile %s: %s", profile_url, exc, extra={"step": "enrich", "error": str(exc)})
                return None
            break

        if not is_verified_match(match):
            logger.debug(
                "Email not verified or unavailable for %s (status=%s, has_email=%s)",
                profile_url,
                getattr(match, "email_status", None),
                bool(getattr(match, "email", None)),
            )
            return None
        return EnrichedContact.from_match(match)

    async def enrich_profiles(self, profile_urls: Sequence[str]) -> List[EnrichedContact]:
        logger.info("Starting enrichment of %d profiles", len(profile_urls), extra={"step": "enrich", "count": len(profile_urls)})
        contacts: List[EnrichedContact] = []
        batches = chunked(list(profile_urls), self.batch_size)
        processed = 0

        for index, batch in enumerate(batches):
            results = await asyncio.gather(*(self.enrich_one(url) for url in batch))
            contacts.extend(contact for contact in results if contact is not None)
            processed += len(batch)
            logger.debug("Enrichment progress: %d/%d", processed, len(profile_urls))

            if index < len(batches) - 1:
                await self._sleep(self.batch_delay_seconds)

        log_step(logger, "Profiles enriched with verified emails", len(contacts))
        return contacts
