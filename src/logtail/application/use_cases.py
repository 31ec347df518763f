from __future__ import annotations
import time
from typing import Awaitable, Callable

from loguru import logger

from ..domain.models import CheckpointRec, LogStreamItem, StreamConfig
from ..ports.rpc import BlockReader, RPCClient
from ..ports.storage import CheckpointSink, EventSink
from ..ports.ticker import Ticker
from .log_stream import LogStream
from .planning import confirmed_height


def resolve_start(after: int, checkpoint: CheckpointSink | None) -> int:
    """Resume from the checkpoint when it is ahead of the requested cursor."""
    if checkpoint is None:
        return after
    last = checkpoint.last_cursor()
    if last is not None and last > after:
        logger.info(f"[Watch] resuming from checkpoint cursor {last} (requested {after})")
        return last
    return after


async def follow_logs(
    *,
    rpc: RPCClient,
    config: StreamConfig,
    sink: EventSink | None = None,
    checkpoint: CheckpointSink | None = None,
    on_item: Callable[[LogStreamItem], Awaitable[None] | None] | None = None,
    max_items: int = 0,
    ticker: Ticker | None = None,
) -> dict[str, int]:
    """
    Drive a LogStream, persisting each item before pulling the next one.
    Stops after `max_items` items (0 = never); stream errors propagate.
    """
    items = total_logs = 0
    async with LogStream(rpc, config, ticker=ticker) as stream:
        async for item in stream:
            if sink is not None and item.logs:
                await sink.write_chunk(item.from_block, item.to_block, item.logs)
            if checkpoint is not None:
                await checkpoint.append(CheckpointRec(
                    from_block=item.from_block, to_block=item.to_block,
                    logs=len(item.logs), updated_at=time.time(),
                ))
            if on_item is not None:
                res = on_item(item)
                if res is not None:
                    await res
            items += 1
            total_logs += len(item.logs)
            if max_items and items >= max_items:
                break
        after = stream.after

    return {"items": items, "total_logs": total_logs, "after": after}


async def chain_head(rpc: BlockReader, confirmations: int) -> dict[str, int | str]:
    block = await rpc.get_block("latest")
    return {
        "latest": block.number,
        "confirmed": confirmed_height(block.number, confirmations),
        "hash": block.hash,
        "timestamp": block.timestamp,
    }
