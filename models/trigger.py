from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, field_validator


POST_PATH_RE = re.compile(r"linkedin\.com/(?:posts|feed/update)/", re.IGNORECASE)


class PipelineTrigger(BaseModel):
    """A parsed request to process one LinkedIn post."""

    post_url: str

    model_config = ConfigDict(frozen=True)

    @field_validator("post_url")
    @classmethod
    def must_be_post_url(cls, value: str) -> str:
        value = value.strip()
        if "linkedin.com" not in value.lower() or not POST_PATH_RE.search(value):
            raise ValueError(f"Not a LinkedIn post URL: {value!r}")
        return value
