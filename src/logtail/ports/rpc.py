# logtail/ports/rpc.py
from __future__ import annotations

from typing import Protocol
from ..domain.models import Block, EventLog, FilterSpec
from ..domain.value_types import BlockTag


class RPCClient(Protocol):
    """Port defining the node calls a LogStream depends on."""

    async def latest_block(self) -> int:
        """Return the latest block number as an integer."""

    async def get_logs(self, spec: FilterSpec) -> list[EventLog]:
        """Return normalized, typed logs matching `spec` for [from_block, to_block] inclusive."""


class BlockReader(Protocol):
    async def get_block(self, block: int | BlockTag = "latest") -> Block:
        """Return the header of a single block."""
