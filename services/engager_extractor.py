from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, Iterator, List, NamedTuple, Optional, Sequence

from services.linkedin_urls import normalize_profile_url, profile_url_from_identifier


logger = logging.getLogger(__name__)

# Flat fields that may hold a profile URL, checked in this order
URL_FIELDS = (
    "profileUrl",
    "profile_url",
    "linkedinUrl",
    "linkedin_url",
    "url",
    "link",
    "actorUrl",
    "authorUrl",
    "memberUrl",
)

# Sub-objects that may describe the engaging person
NESTED_OBJECTS = ("actor", "user", "profile", "reactor", "author", "member", "commenter")

NESTED_ID_FIELDS = ("publicId", "publicIdentifier", "vanityName")
TOP_LEVEL_ID_FIELDS = ("publicId", "publicIdentifier")

PROFILE_PATH_MARKER = "linkedin.com/in/"


class ExtractionStrategy(NamedTuple):
    """A named way of finding raw profile URL candidates in a loosely-typed dict."""

    name: str
    extract: Callable[[Dict[str, Any]], Iterator[str]]


# -- element-level strategies ------------------------------------------------

def _flat_url_fields(item: Dict[str, Any]) -> Iterator[str]:
    for field in URL_FIELDS:
        value = item.get(field)
        if isinstance(value, str) and PROFILE_PATH_MARKER in value:
            yield value


def _identifier_urls(item: Dict[str, Any], fields: Sequence[str]) -> Iterator[str]:
    for field in fields:
        url = profile_url_from_identifier(item.get(field))
        if url:
            yield url


def _nested_objects(item: Dict[str, Any]) -> Iterator[str]:
    for name in NESTED_OBJECTS:
        obj = item.get(name)
        if not isinstance(obj, dict):
            continue
        yield from _flat_url_fields(obj)
        yield from _identifier_urls(obj, NESTED_ID_FIELDS)


def _top_level_identifiers(item: Dict[str, Any]) -> Iterator[str]:
    yield from _identifier_urls(item, TOP_LEVEL_ID_FIELDS)


ITEM_STRATEGIES: tuple[ExtractionStrategy, ...] = (
    ExtractionStrategy("flat_url_fields", _flat_url_fields),
    ExtractionStrategy("nested_objects", _nested_objects),
    ExtractionStrategy("top_level_identifiers", _top_level_identifiers),
)


def extract_item_candidates(item: Any) -> Iterator[str]:
    if not isinstance(item, dict):
        return
    for strategy in ITEM_STRATEGIES:
        yield from strategy.extract(item)


# -- record-level strategies -------------------------------------------------

def _first_collection(record: Dict[str, Any], keys: Sequence[str]) -> List[Any]:
    for key in keys:
        value = record.get(key)
        if value:
            return value if isinstance(value, list) else []
    return []


def _author_profile(record: Dict[str, Any]) -> Iterator[str]:
    value = record.get("authorProfileUrl")
    if isinstance(value, str):
        yield value


def _collection_strategy(keys: Sequence[str], *, nested_author: bool = False) -> Callable[[Dict[str, Any]], Iterator[str]]:
    def _extract(record: Dict[str, Any]) -> Iterator[str]:
        for element in _first_collection(record, keys):
            yield from extract_item_candidates(element)
            if nested_author and isinstance(element, dict):
                yield from extract_item_candidates(element.get("author"))
    return _extract


RECORD_STRATEGIES: tuple[ExtractionStrategy, ...] = (
    ExtractionStrategy("author_profile", _author_profile),
    ExtractionStrategy("reactions", _collection_strategy(("reactions", "likers", "likes"))),
    ExtractionStrategy("comments", _collection_strategy(("comments", "commenters"), nested_author=True)),
    ExtractionStrategy("engagements", _collection_strategy(("engagements", "engagement"))),
)


def _describe_shape(record: Any) -> None:
    if not isinstance(record, dict):
        return
    reactions = record.get("reactions")
    comments = record.get("comments")
    logger.debug(
        "Sample post data keys=%s reactions=%s comments=%s",
        sorted(record.keys()),
        len(reactions) if isinstance(reactions, list) else "n/a",
        len(comments) if isinstance(comments, list) else "n/a",
    )


def extract_profile_urls(records: Optional[Iterable[Any]]) -> List[str]:
    """Collect unique canonical profile URLs from raw post engagement records.

    Unknown shapes contribute nothing; this never raises for malformed input.
    Order is first-seen across records and strategies.
    """
    seen: Dict[str, None] = {}
    records = list(records or [])
    if records:
        _describe_shape(records[0])
    for record in records:
        if not isinstance(record, dict):
            continue
        for strategy in RECORD_STRATEGIES:
            for candidate in strategy.extract(record):
                normalized = normalize_profile_url(candidate)
                if normalized:
                    seen.setdefault(normalized, None)
    return list(seen)
