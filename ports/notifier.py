from __future__ import annotations

from typing import Optional, Protocol

from models import PipelineTrigger, RunStatistics


class NotifierError(RuntimeError):
    """Raised when a chat message could not be delivered."""


class NotifierPort(Protocol):
    async def send_status(self, text: str, thread_ref: Optional[str] = None) -> None:
        ...

    async def send_summary(self, stats: RunStatistics, thread_ref: Optional[str] = None) -> None:
        ...

    async def send_error(self, text: str, thread_ref: Optional[str] = None) -> None:
        ...

    def parse_trigger(self, raw_text: Optional[str]) -> Optional[PipelineTrigger]:
        ...
