"""
Apify integration for scraping LinkedIn post engagers.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from config.settings import Settings, get_settings
from ports.scraper import ScraperError


logger = logging.getLogger(__name__)

TERMINAL_FAILURES = ("FAILED", "ABORTED", "TIMED-OUT")


def _data(response: requests.Response) -> Dict[str, Any]:
    payload = response.json()
    data = payload.get("data") if isinstance(payload, dict) else None
    return data if isinstance(data, dict) else {}


def _error_message(exc: Exception) -> str:
    response = getattr(exc, "response", None)
    if response is not None:
        try:
            payload = response.json()
        except ValueError:
            return str(exc)
        error = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(error, dict):
            error = error.get("message")
        if error:
            return str(error)
    return str(exc)


class ApifyPostScraper:
    """Runs the LinkedIn post actor and returns its raw dataset items."""

    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or get_settings()
        self.api_token = self.settings.apify_api_token
        self.actor_id = self.settings.apify_actor_id
        self.base_url = self.settings.apify_api_base.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

        if not self.api_token:
            raise ValueError("APIFY_API_TOKEN is required")

    def _get(self, path: str, **params: Any) -> requests.Response:
        response = self.session.get(
            f"{self.base_url}{path}",
            params={"token": self.api_token, **params},
            timeout=self.settings.http_timeout_seconds,
        )
        response.raise_for_status()
        return response

    def run_actor(self, actor_id: str, run_input: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Start an actor run, wait for it to finish and return its dataset items."""
        logger.info("Starting Apify actor %s", actor_id)
        try:
            response = self.session.post(
                f"{self.base_url}/acts/{quote(actor_id, safe='')}/runs",
                json=run_input,
                params={"token": self.api_token, "waitForFinish": self.settings.apify_wait_for_finish},
                # waitForFinish keeps the request open server-side
                timeout=self.settings.apify_wait_for_finish + self.settings.http_timeout_seconds,
            )
            response.raise_for_status()
            run = _data(response)
            logger.info("Actor run started run_id=%s status=%s", run.get("id"), run.get("status"))

            if run.get("status") != "SUCCEEDED":
                self.wait_for_run(run.get("id"))

            items = self.get_dataset_items(run.get("defaultDatasetId"))
            logger.info("Actor run completed run_id=%s results=%d", run.get("id"), len(items))
            return items
        except (requests.exceptions.RequestException, ScraperError, ValueError) as exc:
            message = _error_message(exc)
            logger.error("Apify actor run failed: %s", message, extra={"step": "scrape", "error": message})
            raise ScraperError(f"Apify actor failed: {message}") from exc

    def wait_for_run(self, run_id: Optional[str]) -> None:
        attempts = self.settings.apify_poll_attempts
        logger.info("Waiting for Apify run %s to complete", run_id)
        for attempt in range(1, attempts + 1):
            data = _data(self._get(f"/actor-runs/{run_id}"))
            status = data.get("status")
            logger.debug("Polling attempt %d/%d status=%s", attempt, attempts, status)
            if status == "SUCCEEDED":
                return
            if status in TERMINAL_FAILURES:
                raise ScraperError(f"Actor run {status}")
            time.sleep(self.settings.apify_poll_interval_seconds)
        raise ScraperError("Actor run timed out")

    def get_dataset_items(self, dataset_id: Optional[str]) -> List[Dict[str, Any]]:
        data = self._get(f"/datasets/{dataset_id}/items", format="json", clean="true").json()
        return data if isinstance(data, list) else []

    def fetch_post_records(self, post_url: str) -> List[Dict[str, Any]]:
        logger.info("Fetching post engagers for %s", post_url)
        # The actor has accepted each of these input shapes across versions
        run_input = {
            "urls": [post_url],
            "postUrls": [post_url],
            "startUrls": [{"url": post_url}],
        }
        records = self.run_actor(self.actor_id, run_input)
        if not records:
            logger.warning("No post data returned from Apify")
        return records

    async def get_post_engagers(self, post_url: str) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self.fetch_post_records, post_url)
