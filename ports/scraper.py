from __future__ import annotations

from typing import Any, Dict, List, Protocol


class ScraperError(RuntimeError):
    """Scrape job failed; the message is shown to the requesting user."""


class ScraperPort(Protocol):
    async def get_post_engagers(self, post_url: str) -> List[Dict[str, Any]]:
        ...
