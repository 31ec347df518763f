from __future__ import annotations
from ..domain.models import BlockRange


def confirmed_height(latest_block: int, confirmations: int) -> int:
    """Highest block buried under `confirmations` blocks, clamped at genesis."""
    return max(0, latest_block - confirmations)


def plan_range(after: int, latest_block: int, confirmations: int) -> BlockRange | None:
    confirmed = confirmed_height(latest_block, confirmations)
    if confirmed <= after:
        return None
    return BlockRange(after + 1, confirmed)
