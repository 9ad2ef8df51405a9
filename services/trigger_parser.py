from __future__ import annotations

import re
from typing import Optional

from pydantic import ValidationError

from models import PipelineTrigger


# Slack wraps links as <url> or <url|label>
_SLACK_WRAPPED_RE = re.compile(
    r"<(https?://(?:www\.)?linkedin\.com/(?:posts|feed/update)/[^|>]+)", re.IGNORECASE
)
_PLAIN_URL_RE = re.compile(
    r"(https?://(?:www\.)?linkedin\.com/(?:posts|feed/update)/[^\s<>]+)", re.IGNORECASE
)
_TRAILING_JUNK_RE = re.compile(r"[>|].*$")


def parse_trigger(text: Optional[str]) -> Optional[PipelineTrigger]:
    """Pull a LinkedIn post URL out of free-form chat text.

    Accepts a bare URL, a Slack-wrapped link, or "POST_URL: <url>".
    Returns None when no post URL is present.
    """
    if not text:
        return None
    match = _SLACK_WRAPPED_RE.search(text) or _PLAIN_URL_RE.search(text)
    if not match:
        return None
    post_url = _TRAILING_JUNK_RE.sub("", match.group(1).strip())
    try:
        return PipelineTrigger(post_url=post_url)
    except ValidationError:
        return None
