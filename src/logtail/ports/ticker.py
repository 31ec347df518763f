# logtail/ports/ticker.py
from __future__ import annotations
from typing import Protocol


class Ticker(Protocol):
    """Port for the interval timer that paces a LogStream."""

    async def tick(self) -> None:
        """Suspend until the next interval elapses. Raising ends the stream."""
