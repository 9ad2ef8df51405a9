

# Namespace for pipeline steps
from .scrape_engagers import ScrapeEngagers  # noqa: F401
from .enrich_profiles import EnrichProfiles  # noqa: F401
from .deliver_leads import DeliverLeads  # noqa: F401
