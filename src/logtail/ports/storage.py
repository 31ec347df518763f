# logtail/ports/storage.py
from __future__ import annotations

from typing import Iterable, Protocol
from ..domain.models import CheckpointRec, EventLog


class EventSink(Protocol):
    """Port for writing the logs of one confirmed range to durable storage (e.g., Parquet)."""

    async def write_chunk(
        self,
        from_block: int,
        to_block: int,
        events: Iterable[EventLog],
    ) -> None:
        """Persist the events belonging to the range [from_block, to_block]."""


class CheckpointSink(Protocol):
    """Port for recording delivered ranges so a later run can resume its cursor."""

    async def append(self, rec: CheckpointRec) -> None:
        """Append a checkpoint record atomically."""

    def last_cursor(self) -> int | None:
        """Return the highest delivered to_block, or None when nothing was recorded."""
