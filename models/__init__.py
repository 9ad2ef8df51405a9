from .trigger import PipelineTrigger
from .contact import EnrichmentMatch, EnrichedContact, is_verified_match
from .campaign_lead import CampaignLead
from .delivery import BulkUploadResult, DeliveryResult, DeliverySummary
from .run_statistics import PipelineState, RunStatistics

__all__ = [
    "PipelineTrigger",
    "EnrichmentMatch",
    "EnrichedContact",
    "is_verified_match",
    "CampaignLead",
    "BulkUploadResult",
    "DeliveryResult",
    "DeliverySummary",
    "PipelineState",
    "RunStatistics",
]
