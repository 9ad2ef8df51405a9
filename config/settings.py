from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


def _load_env() -> None:
    # Centralized dotenv loading; safe if .env missing
    load_dotenv()


@dataclass(frozen=True)
class Settings:
    # Chat (Slack)
    slack_bot_token: str | None
    slack_channel_id: str | None
    slack_api_url: str

    # Scraper (Apify)
    apify_api_token: str | None
    apify_actor_id: str
    apify_api_base: str
    apify_wait_for_finish: int
    apify_poll_attempts: int
    apify_poll_interval_seconds: float

    # Enricher (Apollo)
    apollo_api_key: str | None
    apollo_api_base: str

    # Delivery (Smartlead)
    smartlead_api_key: str | None
    smartlead_campaign_id: str | None
    smartlead_api_base: str

    # Limits/Concurrency/Timeouts
    enrich_concurrency: int
    enrich_batch_delay_seconds: float
    rate_limit_wait_seconds: float
    rate_limit_max_retries: int
    delivery_pacing_seconds: float
    http_timeout_seconds: int

    log_level: str
    run_env: str = "local"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_env()
    return Settings(
        slack_bot_token=os.getenv("SLACK_BOT_TOKEN"),
        slack_channel_id=os.getenv("SLACK_CHANNEL_ID"),
        slack_api_url=os.getenv("SLACK_API_URL", "https://slack.com/api"),
        apify_api_token=os.getenv("APIFY_API_TOKEN"),
        apify_actor_id=os.getenv("APIFY_LINKEDIN_ACTOR_ID", "supreme_coder/linkedin-post"),
        apify_api_base=os.getenv("APIFY_API_BASE", "https://api.apify.com/v2"),
        apify_wait_for_finish=int(os.getenv("APIFY_WAIT_FOR_FINISH", "300")),
        apify_poll_attempts=int(os.getenv("APIFY_POLL_ATTEMPTS", "60")),
        apify_poll_interval_seconds=float(os.getenv("APIFY_POLL_INTERVAL_SECONDS", "10")),
        apollo_api_key=os.getenv("APOLLO_API_KEY"),
        apollo_api_base=os.getenv("APOLLO_API_BASE", "https://api.apollo.io/api/v1"),
        smartlead_api_key=os.getenv("SMARTLEAD_API_KEY"),
        smartlead_campaign_id=os.getenv("SMARTLEAD_CAMPAIGN_ID"),
        smartlead_api_base=os.getenv("SMARTLEAD_API_BASE", "https://server.smartlead.ai/api/v1"),
        enrich_concurrency=int(os.getenv("ENRICH_CONCURRENCY", "5")),
        enrich_batch_delay_seconds=float(os.getenv("ENRICH_BATCH_DELAY_SECONDS", "1.0")),
        rate_limit_wait_seconds=float(os.getenv("RATE_LIMIT_WAIT_SECONDS", "5.0")),
        rate_limit_max_retries=int(os.getenv("RATE_LIMIT_MAX_RETRIES", "3")),
        delivery_pacing_seconds=float(os.getenv("DELIVERY_PACING_SECONDS", "0.2")),
        http_timeout_seconds=int(os.getenv("HTTP_TIMEOUT_SECONDS", "30")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        run_env=os.getenv("RUN_ENV", "local"),
    )


def missing_backend_vars(settings: Settings, *, with_slack: bool = False) -> list[str]:
    """Names of required environment variables that are unset."""
    required = {
        "APIFY_API_TOKEN": settings.apify_api_token,
        "APOLLO_API_KEY": settings.apollo_api_key,
        "SMARTLEAD_API_KEY": settings.smartlead_api_key,
        "SMARTLEAD_CAMPAIGN_ID": settings.smartlead_campaign_id,
    }
    if with_slack:
        required["SLACK_BOT_TOKEN"] = settings.slack_bot_token
        required["SLACK_CHANNEL_ID"] = settings.slack_channel_id
    return [name for name, value in required.items() if not value]


def require_backends(settings: Settings, *, with_slack: bool = False) -> None:
    missing = missing_backend_vars(settings, with_slack=with_slack)
    if missing:
        raise RuntimeError(
            f"Missing required environment variables: {', '.join(missing)}"
        )
