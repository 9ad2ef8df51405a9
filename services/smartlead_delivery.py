from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests

from config.settings import Settings, get_settings
from models import BulkUploadResult, CampaignLead
from ports.delivery import DeliveryError


logger = logging.getLogger(__name__)

UPLOAD_SETTINGS = {
    "ignore_global_block_list": False,
    "ignore_unsubscribe_list": False,
    "ignore_community_bounce_list": False,
    "ignore_duplicate_leads_in_other_campaign": False,
}


def _first_int(payload: Dict[str, Any], *keys: str) -> Optional[int]:
    for key in keys:
        value = payload.get(key)
        if value:
            try:
                return int(value)
            except (TypeError, ValueError):
                continue
    return None


class SmartleadDelivery:
    """Uploads leads to a Smartlead campaign."""

    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or get_settings()
        self.api_key = self.settings.smartlead_api_key
        self.campaign_id = self.settings.smartlead_campaign_id
        self.base_url = self.settings.smartlead_api_base.rstrip("/")
        if not self.api_key:
            raise ValueError("SMARTLEAD_API_KEY is required")
        if not self.campaign_id:
            raise ValueError("SMARTLEAD_CAMPAIGN_ID is required")
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def upload(self, leads: List[CampaignLead]) -> Dict[str, Any]:
        try:
            response = self.session.post(
                f"{self.base_url}/campaigns/{self.campaign_id}/leads",
                json={
                    "lead_list": [lead.model_dump() for lead in leads],
                    "settings": dict(UPLOAD_SETTINGS),
                },
                params={"api_key": self.api_key},
                timeout=self.settings.http_timeout_seconds,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as exc:
            detail = getattr(getattr(exc, "response", None), "text", None) or str(exc)
            raise DeliveryError(f"Smartlead upload failed: {detail}") from exc
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        return payload if isinstance(payload, dict) else {}

    def upload_bulk(self, leads: List[CampaignLead]) -> BulkUploadResult:
        logger.info("Uploading %d leads to campaign %s", len(leads), self.campaign_id)
        payload = self.upload(leads)
        return BulkUploadResult(
            added=_first_int(payload, "upload_count", "total_leads"),
            failed=_first_int(payload, "failed_count"),
        )

    async def submit_bulk(self, leads: List[CampaignLead]) -> BulkUploadResult:
        return await asyncio.to_thread(self.upload_bulk, leads)

    async def submit_one(self, lead: CampaignLead) -> None:
        await asyncio.to_thread(self.upload, [lead])
