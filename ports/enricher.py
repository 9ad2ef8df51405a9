from __future__ import annotations

from typing import Optional, Protocol

from models import EnrichmentMatch


class RateLimitedError(RuntimeError):
    """The enrichment backend asked us to slow down (HTTP 429)."""


class EnricherPort(Protocol):
    async def enrich_one(self, profile_url: str) -> Optional[EnrichmentMatch]:
        ...
