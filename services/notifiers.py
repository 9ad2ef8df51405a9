from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import requests

from config.settings import Settings, get_settings
from models import PipelineTrigger, RunStatistics
from ports.notifier import NotifierError
from services.reporting import format_error, format_status, format_summary
from services.trigger_parser import parse_trigger


logger = logging.getLogger(__name__)


def should_handle_event(event: Dict[str, Any], channel_id: Optional[str]) -> bool:
    """Only plain user messages in the watched channel start a run."""
    if event.get("bot_id"):
        logger.debug("Message ignored reason=bot")
        return False
    if event.get("subtype"):
        logger.debug("Message ignored reason=subtype")
        return False
    if event.get("channel") != channel_id:
        logger.debug("Message ignored reason=wrong channel")
        return False
    return True


class SlackNotifier:
    """Posts pipeline updates into a Slack channel thread via chat.postMessage."""

    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or get_settings()
        self.bot_token = self.settings.slack_bot_token
        self.channel_id = self.settings.slack_channel_id
        if not self.bot_token:
            raise ValueError("SLACK_BOT_TOKEN is required")
        if not self.channel_id:
            raise ValueError("SLACK_CHANNEL_ID is required")
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {self.bot_token}",
            "Content-Type": "application/json; charset=utf-8",
        })

    def post_message(self, text: str, thread_ref: Optional[str] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"channel": self.channel_id, "text": text}
        if thread_ref:
            payload["thread_ts"] = thread_ref
        try:
            response = self.session.post(
                f"{self.settings.slack_api_url.rstrip('/')}/chat.postMessage",
                json=payload,
                timeout=self.settings.http_timeout_seconds,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as exc:
            logger.error("Failed to send Slack message: %s", exc, extra={"error": str(exc)})
            raise NotifierError(f"Slack message failed: {exc}") from exc
        if not data.get("ok"):
            logger.error("Slack rejected message: %s", data.get("error"), extra={"error": data.get("error")})
            raise NotifierError(f"Slack message failed: {data.get('error')}")
        logger.debug("Slack message sent channel=%s thread=%s", self.channel_id, thread_ref)
        return data

    async def send_message(self, text: str, thread_ref: Optional[str] = None) -> None:
        await asyncio.to_thread(self.post_message, text, thread_ref)

    async def send_status(self, text: str, thread_ref: Optional[str] = None) -> None:
        await self.send_message(format_status(text), thread_ref)

    async def send_summary(self, stats: RunStatistics, thread_ref: Optional[str] = None) -> None:
        await self.send_message(format_summary(stats), thread_ref)

    async def send_error(self, text: str, thread_ref: Optional[str] = None) -> None:
        await self.send_message(format_error(text), thread_ref)

    def parse_trigger(self, raw_text: Optional[str]) -> Optional[PipelineTrigger]:
        return parse_trigger(raw_text)


class ConsoleNotifier:
    """Notifier for CLI runs: everything goes to the log; the CLI prints the final summary."""

    async def send_status(self, text: str, thread_ref: Optional[str] = None) -> None:
        logger.info(format_status(text))

    async def send_summary(self, stats: RunStatistics, thread_ref: Optional[str] = None) -> None:
        logger.info(format_summary(stats))

    async def send_error(self, text: str, thread_ref: Optional[str] = None) -> None:
        logger.error(format_error(text))

    def parse_trigger(self, raw_text: Optional[str]) -> Optional[PipelineTrigger]:
        return parse_trigger(raw_text)
