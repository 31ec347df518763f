from __future__ import annotations
import asyncio

from ..errors import ConfigError
from ..ports.ticker import Ticker


class IntervalTicker(Ticker):
    """
    Fixed-cadence ticker on the running loop's clock.
    The first tick fires one interval after the first `tick()` call; ticks missed
    while the caller was busy are skipped rather than delivered in a burst.
    """
    def __init__(self, interval_s: float) -> None:
        if interval_s <= 0:
            raise ConfigError(f"interval must be > 0, got {interval_s}")
        self.interval_s = float(interval_s)
        self._deadline: float | None = None

    async def tick(self) -> None:
        loop = asyncio.get_running_loop()
        if self._deadline is None:
            self._deadline = loop.time() + self.interval_s
        delay = self._deadline - loop.time()
        if delay > 0:
            await asyncio.sleep(delay)
        now = loop.time()
        nxt = self._deadline + self.interval_s
        self._deadline = nxt if nxt > now else now + self.interval_s
