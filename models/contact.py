from __future__ import annotations

from pydantic import BaseModel, ConfigDict, model_validator


# Enrichment statuses that never qualify an email for delivery
REJECTED_EMAIL_STATUSES = frozenset({"guessed", "unavailable"})


def is_rejected_status(status: str | None) -> bool:
    return (status or "").strip().lower() in REJECTED_EMAIL_STATUSES


class EnrichmentMatch(BaseModel):
    """Raw enrichment lookup outcome; the email may be missing or unverified."""

    linkedin_url: str
    email: str | None = None
    email_status: str | None = None
    first_name: str = ""
    last_name: str = ""
    title: str = ""
    company_name: str = ""

    model_config = ConfigDict(extra="ignore")


def is_verified_match(match: EnrichmentMatch | None) -> bool:
    if match is None:
        return False
    if not (match.email or "").strip():
        return False
    return not is_rejected_status(match.email_status)


class EnrichedContact(BaseModel):
    """A contact with a deliverable email. Never exists with a guessed or empty email."""

    email: str
    first_name: str = ""
    last_name: str = ""
    title: str = ""
    company_name: str = ""
    linkedin_url: str
    email_status: str | None = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def email_is_deliverable(self) -> "EnrichedContact":
        if not self.email.strip():
            raise ValueError("EnrichedContact requires a non-empty email")
        if is_rejected_status(self.email_status):
            raise ValueError(f"Email status {self.email_status!r} is not verified")
        return self

    @classmethod
    def from_match(cls, match: EnrichmentMatch) -> "EnrichedContact":
        return cls(
            email=(match.email or "").strip(),
            first_name=match.first_name or "",
            last_name=match.last_name or "",
            title=match.title or "",
            company_name=match.company_name or "",
            linkedin_url=match.linkedin_url,
            email_status=match.email_status,
        )
