from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from models.contact import EnrichedContact


class LeadCustomFields(BaseModel):
    company: str = ""
    title: str = ""
    linkedin_url: str = ""


class CampaignLead(BaseModel):
    """Campaign backend lead shape: only email and names are top-level."""

    email: str
    first_name: str = ""
    last_name: str = ""
    custom_fields: LeadCustomFields = Field(default_factory=LeadCustomFields)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_contact(cls, contact: EnrichedContact) -> "CampaignLead":
        return cls(
            email=contact.email,
            first_name=contact.first_name or "",
            last_name=contact.last_name or "",
            custom_fields=LeadCustomFields(
                company=contact.company_name or "",
                title=contact.title or "",
                linkedin_url=contact.linkedin_url or "",
            ),
        )
