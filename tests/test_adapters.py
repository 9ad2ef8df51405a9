from __future__ import annotations

import asyncio
from typing import Any, List, Optional

import pytest
import requests

from fakes import make_settings
from models import CampaignLead, RunStatistics
from ports.delivery import DeliveryError
from ports.enricher import RateLimitedError
from ports.notifier import NotifierError
from ports.scraper import ScraperError
from services.apollo_enricher import ApolloEnricher
from services.notifiers import SlackNotifier, should_handle_event
from services.smartlead_delivery import SmartleadDelivery
from sources.apify_posts import ApifyPostScraper


class _Response:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no json")
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error", response=self)


class _Session:
    def __init__(self, responses: List[_Response]) -> None:
        self.headers: dict = {}
        self.responses = list(responses)
        self.requests: List[dict] = []

    def _next(self, method: str, url: str, **kwargs) -> _Response:
        self.requests.append({"method": method, "url": url, **kwargs})
        return self.responses.pop(0)

    def post(self, url: str, **kwargs) -> _Response:
        return self._next("POST", url, **kwargs)

    def get(self, url: str, **kwargs) -> _Response:
        return self._next("GET", url, **kwargs)


def _settings(**overrides):
    base = dict(
        apify_api_token="apify-token",
        apollo_api_key="apollo-key",
        smartlead_api_key="sl-key",
        smartlead_campaign_id="42",
        slack_bot_token="xoxb-1",
        slack_channel_id="C1",
        apify_poll_interval_seconds=0,
    )
    base.update(overrides)
    return make_settings(**base)


# -- Apify ---------------------------------------------------------------

def test_apify_returns_dataset_items_after_polling():
    session = _Session([
        _Response(201, {"data": {"id": "run1", "status": "RUNNING", "defaultDatasetId": "ds1"}}),
        _Response(200, {"data": {"status": "RUNNING"}}),
        _Response(200, {"data": {"status": "SUCCEEDED"}}),
        _Response(200, [{"authorProfileUrl": "https://www.linkedin.com/in/a"}]),
    ])
    scraper = ApifyPostScraper(_settings(), session=session)

    records = asyncio.run(scraper.get_post_engagers("https://www.linkedin.com/posts/x"))

    assert records == [{"authorProfileUrl": "https://www.linkedin.com/in/a"}]
    start = session.requests[0]
    assert start["url"].endswith("/acts/supreme_coder%2Flinkedin-post/runs")
    assert start["json"]["postUrls"] == ["https://www.linkedin.com/posts/x"]
    assert start["params"]["token"] == "apify-token"
    assert session.requests[-1]["url"].endswith("/datasets/ds1/items")


def test_apify_failed_run_raises_scraper_error():
    session = _Session([
        _Response(201, {"data": {"id": "run1", "status": "READY", "defaultDatasetId": "ds1"}}),
        _Response(200, {"data": {"status": "FAILED"}}),
    ])
    scraper = ApifyPostScraper(_settings(), session=session)
    with pytest.raises(ScraperError, match="Actor run FAILED"):
        scraper.fetch_post_records("https://www.linkedin.com/posts/x")


def test_apify_poll_exhaustion_times_out():
    session = _Session([
        _Response(201, {"data": {"id": "run1", "status": "RUNNING", "defaultDatasetId": "ds1"}}),
        _Response(200, {"data": {"status": "RUNNING"}}),
        _Response(200, {"data": {"status": "RUNNING"}}),
    ])
    scraper = ApifyPostScraper(_settings(apify_poll_attempts=2), session=session)
    with pytest.raises(ScraperError, match="timed out"):
        scraper.fetch_post_records("https://www.linkedin.com/posts/x")


def test_apify_prefers_backend_error_message():
    session = _Session([_Response(402, {"error": {"message": "Monthly usage exceeded"}})])
    scraper = ApifyPostScraper(_settings(), session=session)
    with pytest.raises(ScraperError, match="Apify actor failed: Monthly usage exceeded"):
        scraper.fetch_post_records("https://www.linkedin.com/posts/x")


@pytest.mark.parametrize("body,reason", [
    ({"error": "Monthly usage limit exceeded"}, "Monthly usage limit exceeded"),
    (["unexpected", "list"], "402 error"),
    ({"error": {"type": "payment-required"}}, "402 error"),
])
def test_apify_unusual_error_bodies_still_raise_scraper_error(body, reason):
    session = _Session([_Response(402, body)])
    scraper = ApifyPostScraper(_settings(), session=session)
    with pytest.raises(ScraperError, match=f"Apify actor failed: {reason}"):
        scraper.fetch_post_records("https://www.linkedin.com/posts/x")


def test_apify_run_body_that_is_not_an_object_is_treated_as_empty():
    session = _Session([
        _Response(201, ["not", "an", "object"]),
        _Response(200, {"data": {"status": "SUCCEEDED"}}),
        _Response(200, []),
    ])
    scraper = ApifyPostScraper(_settings(), session=session)
    assert scraper.fetch_post_records("https://www.linkedin.com/posts/x") == []


def test_apify_requires_token():
    with pytest.raises(ValueError):
        ApifyPostScraper(_settings(apify_api_token=None), session=_Session([]))


# -- Apollo --------------------------------------------------------------

def test_apollo_maps_person_to_match():
    session = _Session([_Response(200, {"person": {
        "email": "jane@acme.com",
        "email_status": "verified",
        "first_name": "Jane",
        "last_name": "Doe",
        "title": "CTO",
        "organization": {"name": "Acme"},
    }})])
    enricher = ApolloEnricher(_settings(), session=session)

    match = asyncio.run(enricher.enrich_one("https://www.linkedin.com/in/jane"))

    assert match.email == "jane@acme.com"
    assert match.company_name == "Acme"
    assert match.linkedin_url == "https://www.linkedin.com/in/jane"
    assert session.headers["X-Api-Key"] == "apollo-key"
    assert session.requests[0]["json"] == {
        "linkedin_url": "https://www.linkedin.com/in/jane",
        "reveal_personal_emails": False,
    }


def test_apollo_company_falls_back_to_flat_field():
    session = _Session([_Response(200, {"person": {"email": "a@b.co", "company": "Flat Co"}})])
    match = ApolloEnricher(_settings(), session=session).match_profile("https://www.linkedin.com/in/a")
    assert match.company_name == "Flat Co"


def test_apollo_no_person_returns_none():
    session = _Session([_Response(200, {"person": None})])
    assert ApolloEnricher(_settings(), session=session).match_profile("https://www.linkedin.com/in/a") is None


def test_apollo_429_is_rate_limited():
    session = _Session([_Response(429, {"error": "slow down"})])
    with pytest.raises(RateLimitedError):
        ApolloEnricher(_settings(), session=session).match_profile("https://www.linkedin.com/in/a")


def test_apollo_other_http_errors_raise():
    session = _Session([_Response(500, {})])
    with pytest.raises(requests.exceptions.HTTPError):
        ApolloEnricher(_settings(), session=session).match_profile("https://www.linkedin.com/in/a")


# -- Smartlead -----------------------------------------------------------

def _lead(email: str = "jane@acme.com") -> CampaignLead:
    return CampaignLead(email=email, first_name="Jane")


def test_smartlead_bulk_reads_counts():
    session = _Session([_Response(200, {"upload_count": 2, "failed_count": 1})])
    delivery = SmartleadDelivery(_settings(), session=session)

    result = asyncio.run(delivery.submit_bulk([_lead(), _lead("b@acme.com"), _lead("c@acme.com")]))

    assert (result.added, result.failed) == (2, 1)
    sent = session.requests[0]
    assert sent["url"].endswith("/campaigns/42/leads")
    assert sent["params"] == {"api_key": "sl-key"}
    assert len(sent["json"]["lead_list"]) == 3
    assert sent["json"]["settings"]["ignore_global_block_list"] is False


def test_smartlead_bulk_without_counts_leaves_them_unset():
    session = _Session([_Response(200, {"ok": True})])
    result = SmartleadDelivery(_settings(), session=session).upload_bulk([_lead()])
    assert result.added is None and result.failed is None


def test_smartlead_http_error_becomes_delivery_error():
    session = _Session([_Response(400, {}, text="invalid email")])
    with pytest.raises(DeliveryError, match="invalid email"):
        asyncio.run(SmartleadDelivery(_settings(), session=session).submit_one(_lead()))


def test_smartlead_requires_campaign():
    with pytest.raises(ValueError):
        SmartleadDelivery(_settings(smartlead_campaign_id=None), session=_Session([]))


# -- Slack ---------------------------------------------------------------

def test_slack_posts_into_thread():
    session = _Session([_Response(200, {"ok": True})])
    notifier = SlackNotifier(_settings(), session=session)

    asyncio.run(notifier.send_summary(RunStatistics(engagers=3, enriched=2, pushed=1, failed=1), "123.45"))

    sent = session.requests[0]
    assert sent["url"].endswith("/chat.postMessage")
    assert sent["json"]["channel"] == "C1"
    assert sent["json"]["thread_ts"] == "123.45"
    assert "Found *3* engagers" in sent["json"]["text"]
    assert "⚠️ 1 failed to push" in sent["json"]["text"]
    assert session.headers["Authorization"] == "Bearer xoxb-1"


def test_slack_not_ok_raises():
    session = _Session([_Response(200, {"ok": False, "error": "channel_not_found"})])
    notifier = SlackNotifier(_settings(), session=session)
    with pytest.raises(NotifierError, match="channel_not_found"):
        asyncio.run(notifier.send_status("hi"))


@pytest.mark.parametrize("event,expected", [
    ({"channel": "C1", "text": "x"}, True),
    ({"channel": "C1", "bot_id": "B1"}, False),
    ({"channel": "C1", "subtype": "message_changed"}, False),
    ({"channel": "C2"}, False),
])
def test_should_handle_event(event, expected):
    assert should_handle_event(event, "C1") is expected
