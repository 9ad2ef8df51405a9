from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Sequence

from models import CampaignLead, DeliveryResult, DeliverySummary, EnrichedContact
from ports.delivery import DeliveryBackendPort
from utils.logging_setup import log_step


logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class DeliverySubmitter:
    """Pushes contacts to the campaign backend: bulk first, one by one on failure.

    Delivery problems are reported through the returned counts, never raised.
    """

    def __init__(
        self,
        backend: DeliveryBackendPort,
        *,
        pacing_seconds: float = 0.2,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.backend = backend
        self.pacing_seconds = pacing_seconds
        self._sleep = sleep

    async def submit(self, contacts: Sequence[EnrichedContact]) -> DeliverySummary:
        logger.info("Adding %d leads to campaign", len(contacts), extra={"step": "deliver", "count": len(contacts)})
        if not contacts:
            logger.warning("No leads to add to campaign")
            return DeliverySummary(added=0, failed=0, mode="skipped")

        leads = [CampaignLead.from_contact(c) for c in contacts]
        try:
            result = await self.backend.submit_bulk(leads)
        except Exception as exc:
            logger.error(
                "Bulk lead upload failed: %s", exc,
                extra={"step": "deliver", "status": "bulk_failed", "error": str(exc)},
            )
            return await self.submit_individually(leads)

        added = result.added if result.added is not None else len(leads)
        failed = result.failed if result.failed is not None else 0
        log_step(logger, "Leads pushed to campaign", added, failed=failed)
        return DeliverySummary(added=added, failed=failed, mode="bulk")

    async def submit_individually(self, leads: List[CampaignLead]) -> DeliverySummary:
        logger.info("Falling back to individual lead adds")
        results: List[DeliveryResult] = []

        for index, lead in enumerate(leads):
            if index:
                await self._sleep(self.pacing_seconds)
            try:
                await self.backend.submit_one(lead)
            except Exception as exc:
                logger.debug("Failed to add individual lead %s: %s", lead.email, exc)
                results.append(DeliveryResult(success=False, email=lead.email, error=str(exc)))
                continue
            results.append(DeliveryResult(success=True, email=lead.email))

        added = sum(1 for r in results if r.success)
        failed = len(results) - added
        log_step(logger, "Leads pushed to campaign (individual)", added, failed=failed)
        return DeliverySummary(added=added, failed=failed, mode="individual", results=results)
