from __future__ import annotations

from typing import Any, Optional


PROFILE_URL_TEMPLATE = "https://www.linkedin.com/in/{identifier}"


def normalize_profile_url(url: Any) -> Optional[str]:
    """Canonicalize a LinkedIn URL, or return None when it is not one.

    Drops the query string and trailing slashes and upgrades http to https:
      - "http://linkedin.com/in/a/"          -> "https://linkedin.com/in/a"
      - "https://linkedin.com/in/a?trk=x"    -> "https://linkedin.com/in/a"
    """
    if not url or not isinstance(url, str):
        return None
    if "linkedin.com" not in url:
        return None
    normalized = url.split("?", 1)[0].rstrip("/")
    if normalized.startswith("http://"):
        normalized = "https://" + normalized[len("http://"):]
    return normalized or None


def profile_url_from_identifier(identifier: Any) -> Optional[str]:
    """Build the canonical profile URL from a public identifier/vanity name."""
    if identifier is None or isinstance(identifier, (dict, list, bool)):
        return None
    text = str(identifier).strip()
    if not text:
        return None
    return normalize_profile_url(PROFILE_URL_TEMPLATE.format(identifier=text))

