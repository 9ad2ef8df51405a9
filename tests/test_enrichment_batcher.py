from __future__ import annotations

import asyncio

import pytest

from fakes import FakeEnricher, RateLimitedError, RecordingSleep, verified
from models import EnrichmentMatch
from services.enrichment_batcher import EnrichmentBatcher, chunked


URL = "https://www.linkedin.com/in/jane"


def _run(coro):
    return asyncio.run(coro)


def test_guessed_email_yields_no_contact():
    enricher = FakeEnricher({URL: verified(URL, status="guessed")})
    batcher = EnrichmentBatcher(enricher, sleep=RecordingSleep())
    assert _run(batcher.enrich_profiles([URL])) == []


def test_verified_email_yields_exactly_one_contact():
    enricher = FakeEnricher({URL: verified(URL)})
    batcher = EnrichmentBatcher(enricher, sleep=RecordingSleep())
    contacts = _run(batcher.enrich_profiles([URL]))
    assert len(contacts) == 1
    assert contacts[0].email == "jane@example.com"
    assert contacts[0].linkedin_url == URL


@pytest.mark.parametrize("match", [
    None,
    EnrichmentMatch(linkedin_url=URL, email=None, email_status="verified"),
    EnrichmentMatch(linkedin_url=URL, email="   ", email_status="verified"),
    EnrichmentMatch(linkedin_url=URL, email="j@example.com", email_status="Unavailable"),
])
def test_unusable_matches_are_dropped(match):
    batcher = EnrichmentBatcher(FakeEnricher({URL: match}), sleep=RecordingSleep())
    assert _run(batcher.enrich_profiles([URL])) == []


def test_twelve_urls_dispatch_in_three_waves_with_two_pauses(monkeypatch):
    urls = [f"https://www.linkedin.com/in/p{i}" for i in range(12)]
    in_flight = {"now": 0, "peak": 0}
    waves = []

    class TrackingEnricher:
        async def enrich_one(self, url):
            in_flight["now"] += 1
            in_flight["peak"] = max(in_flight["peak"], in_flight["now"])
            await asyncio.sleep(0)
            in_flight["now"] -= 1
            return verified(url)

    sleep = RecordingSleep()
    batcher = EnrichmentBatcher(TrackingEnricher(), batch_size=5, batch_delay_seconds=1.0, sleep=sleep)

    original_gather = asyncio.gather

    def counting_gather(*aws, **kwargs):
        waves.append(len(aws))
        return original_gather(*aws, **kwargs)

    monkeypatch.setattr(asyncio, "gather", counting_gather)
    contacts = _run(batcher.enrich_profiles(urls))

    assert waves == [5, 5, 2]
    assert sleep.calls == [1.0, 1.0]
    assert in_flight["peak"] == 5
    assert [c.linkedin_url for c in contacts] == urls


def test_rate_limited_url_is_retried_after_wait():
    enricher = FakeEnricher({URL: [RateLimitedError("429"), RateLimitedError("429"), verified(URL)]})
    sleep = RecordingSleep()
    batcher = EnrichmentBatcher(enricher, rate_limit_wait_seconds=5.0, sleep=sleep)
    contacts = _run(batcher.enrich_profiles([URL]))
    assert len(contacts) == 1
    assert enricher.calls == [URL, URL, URL]
    assert sleep.calls == [5.0, 5.0]


def test_rate_limit_retries_are_capped():
    enricher = FakeEnricher({URL: RateLimitedError("429")})
    sleep = RecordingSleep()
    batcher = EnrichmentBatcher(enricher, max_rate_limit_retries=2, sleep=sleep)
    assert _run(batcher.enrich_profiles([URL])) == []
    assert len(enricher.calls) == 3
    assert sleep.calls == [5.0, 5.0]


def test_other_failures_do_not_abort_the_batch():
    good = "https://www.linkedin.com/in/good"
    enricher = FakeEnricher({URL: ValueError("boom"), good: verified(good)})
    batcher = EnrichmentBatcher(enricher, sleep=RecordingSleep())
    contacts = _run(batcher.enrich_profiles([URL, good]))
    assert [c.linkedin_url for c in contacts] == [good]


def test_empty_input_makes_no_calls():
    enricher = FakeEnricher()
    sleep = RecordingSleep()
    assert _run(EnrichmentBatcher(enricher, sleep=sleep).enrich_profiles([])) == []
    assert enricher.calls == []
    assert sleep.calls == []


def test_invalid_batch_size():
    with pytest.raises(ValueError):
        EnrichmentBatcher(FakeEnricher(), batch_size=0)


def test_chunked():
    assert chunked([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]
    assert chunked([], 3) == []
