from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import requests

from config.settings import Settings, get_settings
from models import EnrichmentMatch
from ports.enricher import RateLimitedError


logger = logging.getLogger(__name__)


def map_person_to_match(person: Dict[str, Any], linkedin_url: str) -> EnrichmentMatch:
    organization = person.get("organization") or {}
    return EnrichmentMatch(
        linkedin_url=linkedin_url,
        email=person.get("email") or None,
        email_status=person.get("email_status") or None,
        first_name=person.get("first_name") or "",
        last_name=person.get("last_name") or "",
        title=person.get("title") or "",
        company_name=organization.get("name") or person.get("company") or "",
    )


class ApolloEnricher:
    """Looks up a LinkedIn profile with Apollo's people/match endpoint."""

    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or get_settings()
        self.api_key = self.settings.apollo_api_key
        self.base_url = self.settings.apollo_api_base.rstrip("/")
        if not self.api_key:
            raise ValueError("APOLLO_API_KEY is required")
        self.session = session or requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "Cache-Control": "no-cache",
            "X-Api-Key": self.api_key,
        })

    def match_profile(self, linkedin_url: str) -> Optional[EnrichmentMatch]:
        response = self.session.post(
            f"{self.base_url}/people/match",
            json={"linkedin_url": linkedin_url, "reveal_personal_emails": False},
            timeout=self.settings.http_timeout_seconds,
        )
        if response.status_code == 429:
            raise RateLimitedError(f"Apollo rate limit hit for {linkedin_url}")
        response.raise_for_status()

        person = (response.json() or {}).get("person")
        if not person:
            logger.debug("No person data found for %s", linkedin_url)
            return None
        return map_person_to_match(person, linkedin_url)

    async def enrich_one(self, profile_url: str) -> Optional[EnrichmentMatch]:
        return await asyncio.to_thread(self.match_profile, profile_url)
