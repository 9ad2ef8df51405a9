from __future__ import annotations

from typing import List, Protocol

from models import BulkUploadResult, CampaignLead


class DeliveryError(RuntimeError):
    """The campaign backend rejected a lead upload."""


class DeliveryBackendPort(Protocol):
    async def submit_bulk(self, leads: List[CampaignLead]) -> BulkUploadResult:
        ...

    async def submit_one(self, lead: CampaignLead) -> None:
        ...
