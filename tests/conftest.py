"""Shared fakes for the node client and the ticker."""

from __future__ import annotations

import asyncio
from typing import Callable

import pytest

from logtail.domain.models import Block, EventLog, FilterSpec, LogFilter
from logtail.domain.value_types import Address, Topic
from logtail.errors import TickerError

ADDRESS = "0x" + "ab" * 20
TOPIC0 = "0x" + "11" * 32


def make_log(block_number: int, log_index: int = 0) -> EventLog:
    return EventLog(
        address=Address(ADDRESS),
        topics=(Topic(TOPIC0),),
        data_hex="0x",
        block_number=block_number,
        block_hash="0x" + f"{block_number:064x}",
        tx_hash="0x" + f"{block_number * 1000 + log_index:064x}",
        log_index=log_index,
    )


class FakeTicker:
    """Ticks immediately `limit` times, then fails like a broken timer."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.ticks = 0

    async def tick(self) -> None:
        if self.ticks >= self.limit:
            raise TickerError("fake ticker exhausted")
        self.ticks += 1
        await asyncio.sleep(0)


class FakeRPC:
    """
    Reports `heights` in order, one per latest_block() call, and returns one log
    per block of every requested range. `fail_logs_on` makes the n-th (1-based)
    get_logs call raise.
    """

    def __init__(
        self,
        heights: list[int],
        *,
        fail_logs_on: int | None = None,
        fail_height_on: int | None = None,
        logs_for: Callable[[FilterSpec], list[EventLog]] | None = None,
    ) -> None:
        self.heights = list(heights)
        self.fail_logs_on = fail_logs_on
        self.fail_height_on = fail_height_on
        self.logs_for = logs_for or (lambda spec: [make_log(b) for b in range(spec.from_block, spec.to_block + 1)])
        self.height_calls = 0
        self.log_calls: list[FilterSpec] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def _enter(self) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0)

    async def latest_block(self) -> int:
        await self._enter()
        try:
            self.height_calls += 1
            if self.fail_height_on == self.height_calls:
                raise ConnectionError("node unreachable")
            idx = min(self.height_calls, len(self.heights)) - 1
            return self.heights[idx]
        finally:
            self.in_flight -= 1

    async def get_logs(self, spec: FilterSpec) -> list[EventLog]:
        await self._enter()
        try:
            self.log_calls.append(spec)
            if self.fail_logs_on == len(self.log_calls):
                raise ConnectionError("connection reset by peer")
            return self.logs_for(spec)
        finally:
            self.in_flight -= 1

    async def get_block(self, block="latest") -> Block:
        return Block(number=self.heights[-1], hash="0x" + "cd" * 32, parent_hash="0x" + "ef" * 32, timestamp=1_700_000_000)

    async def __aenter__(self) -> "FakeRPC":
        return self

    async def __aexit__(self, *exc: object) -> None:
        return None


@pytest.fixture
def log_filter() -> LogFilter:
    return LogFilter.for_events(ADDRESS, [TOPIC0])
