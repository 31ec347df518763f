"""
Confirmed-range log stream.

A LogStream turns interval ticks into contiguous, confirmed block ranges:

    Wait -> FetchingHeight -> FetchingLogs(from, to) -> Emit(item) -> Wait

Only one node call is in flight at a time, and the next tick is not awaited
until the consumer pulls again. The cursor (`after`) advances only when an
item is handed out, so a fresh stream built from a saved `after` replays
exactly what an uninterrupted run would have produced.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Union

from loguru import logger

from ..adapters.interval_ticker import IntervalTicker
from ..domain.models import LogFilter, LogStreamItem, StreamConfig
from ..errors import LogTailError, RPCError, TickerError
from ..ports.rpc import RPCClient
from ..ports.ticker import Ticker
from .planning import plan_range


@dataclass(slots=True, frozen=True)
class Wait:
    pass


@dataclass(slots=True, frozen=True)
class FetchingHeight:
    pass


@dataclass(slots=True, frozen=True)
class FetchingLogs:
    from_block: int
    to_block: int


@dataclass(slots=True, frozen=True)
class Emit:
    item: LogStreamItem | None


@dataclass(slots=True, frozen=True)
class Done:
    pass


StreamState = Union[Wait, FetchingHeight, FetchingLogs, Emit, Done]

# returned by _run when aclose() cancelled the pending call
_CLOSED: Any = object()


class LogStream:
    """Async iterator of LogStreamItem. Ends only on error or `aclose()`."""

    def __init__(self, rpc: RPCClient, config: StreamConfig, *, ticker: Ticker | None = None) -> None:
        self._rpc = rpc
        self._ticker: Ticker = ticker if ticker is not None else IntervalTicker(config.poll_interval)
        self._filter: LogFilter = config.filter
        self._confirmations = config.confirmations
        self._after = config.after
        self._state: StreamState = Wait()
        self._running = False
        self._pending: asyncio.Future[Any] | None = None

    @property
    def after(self) -> int:
        """Last block already delivered; safe to persist between items."""
        return self._after

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def closed(self) -> bool:
        return isinstance(self._state, Done)

    def __aiter__(self) -> "LogStream":
        return self

    async def __anext__(self) -> LogStreamItem:
        if self._running:
            raise RuntimeError("LogStream is already running")
        self._running = True
        try:
            return await self._advance()
        finally:
            self._running = False

    async def _advance(self) -> LogStreamItem:
        while True:
            state = self._state
            if isinstance(state, Done):
                raise StopAsyncIteration
            if isinstance(state, Emit):
                self._state = Wait()
                if state.item is not None:
                    return state.item
                continue

            try:
                next_state = await self._step(state)
            except LogTailError as e:
                self._state = Done()
                logger.error(f"[LogStream] terminated after block {self._after}: {e}")
                raise

            # closed by aclose() while a call was pending
            if self.closed:
                raise StopAsyncIteration
            if isinstance(next_state, Emit) and next_state.item is not None:
                self._after = next_state.item.to_block
            self._state = next_state

    async def _run(self, aw: Awaitable[Any], fail: Callable[[str], LogTailError]) -> Any:
        """
        Await one collaborator call as a task that aclose() can cancel.
        Foreign exceptions are wrapped with `fail`; a cancelled call yields _CLOSED.
        """
        task = asyncio.ensure_future(aw)
        self._pending = task
        try:
            await asyncio.wait({task})
        finally:
            self._pending = None
            if not task.done():
                task.cancel()
        if task.cancelled():
            return _CLOSED
        exc = task.exception()
        if exc is None:
            return task.result()
        if isinstance(exc, LogTailError):
            raise exc
        raise fail(f"{type(exc).__name__}: {exc}") from exc

    async def _step(self, state: StreamState) -> StreamState:
        if isinstance(state, Wait):
            res = await self._run(self._ticker.tick(), lambda m: TickerError(f"ticker failed: {m}"))
            return Done() if res is _CLOSED else FetchingHeight()

        if isinstance(state, FetchingHeight):
            latest = await self._run(
                self._rpc.latest_block(),
                lambda m: RPCError(f"eth_blockNumber failed: {m}", method="eth_blockNumber"),
            )
            if latest is _CLOSED:
                return Done()
            planned = plan_range(self._after, latest, self._confirmations)
            if planned is None:
                logger.debug(f"[LogStream] head={latest} confirmations={self._confirmations}: nothing past {self._after}")
                return Wait()
            return FetchingLogs(planned.start, planned.end)

        if isinstance(state, FetchingLogs):
            spec = self._filter.bounded(state.from_block, state.to_block)

            async def fetch() -> tuple:
                return tuple(await self._rpc.get_logs(spec) or ())

            logs = await self._run(fetch(), lambda m: RPCError(f"eth_getLogs failed: {m}", method="eth_getLogs"))
            if logs is _CLOSED:
                return Done()
            logger.info(f"[LogStream] range {state.from_block}-{state.to_block}: {len(logs)} logs")
            return Emit(LogStreamItem(state.from_block, state.to_block, logs))

        raise AssertionError(f"unexpected state {state!r}")

    async def aclose(self) -> None:
        """Close the stream, cancelling any call still in flight."""
        self._state = Done()
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()

    async def __aenter__(self) -> "LogStream":
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()


def log_stream(rpc: RPCClient, config: StreamConfig, *, ticker: Ticker | None = None) -> LogStream:
    return LogStream(rpc, config, ticker=ticker)
