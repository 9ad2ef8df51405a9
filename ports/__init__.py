from .notifier import NotifierError, NotifierPort
from .scraper import ScraperError, ScraperPort
from .enricher import EnricherPort, RateLimitedError
from .delivery import DeliveryBackendPort, DeliveryError

__all__ = [
    "NotifierError",
    "NotifierPort",
    "ScraperError",
    "ScraperPort",
    "EnricherPort",
    "RateLimitedError",
    "DeliveryBackendPort",
    "DeliveryError",
]
