from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from eth_utils import is_address, is_hex

from ..errors import ConfigError
from .value_types import Address, Topic

MAX_TOPIC_POSITIONS = 4

# one entry per indexed position: None matches anything, a tuple is an OR of hashes
TopicSlot = tuple[Topic, ...] | None


def _normalize_address(a: str) -> Address:
    s = str(a).strip()
    if not is_address(s):
        raise ConfigError(f"Invalid address: {a!r}")
    return Address(s.lower())


def _is_topic_hash(x: str) -> bool:
    return isinstance(x, str) and x.startswith("0x") and len(x) == 66 and is_hex(x)


def _normalize_slot(slot: Iterable[str] | str | None) -> TopicSlot:
    if slot is None:
        return None
    items = [slot] if isinstance(slot, str) else list(slot)
    out = tuple(Topic(str(t).strip().lower()) for t in items)
    if not out or not all(_is_topic_hash(t) for t in out):
        raise ConfigError(f"Invalid topic(s): {items}")
    return out


@dataclass(slots=True, frozen=True)
class BlockRange:
    start: int
    end: int
    def span(self) -> int: return self.end - self.start + 1


@dataclass(slots=True, frozen=True)
class EventLog:
    address: Address
    topics: tuple[Topic, ...]
    data_hex: str
    block_number: int
    block_hash: str
    tx_hash: str
    log_index: int
    removed: bool = False


@dataclass(slots=True, frozen=True)
class Block:
    number: int
    hash: str
    parent_hash: str
    timestamp: int


@dataclass(slots=True, frozen=True)
class FilterSpec:
    """Address/topic predicate bound to a concrete inclusive block range."""
    addresses: tuple[Address, ...]
    topics: tuple[TopicSlot, ...]
    from_block: int
    to_block: int


@dataclass(slots=True, frozen=True)
class LogFilter:
    """
    Address/topic template without block bounds. Fixed for the lifetime of a stream;
    `bounded()` produces the per-range FilterSpec sent to the node.
    """
    addresses: tuple[Address, ...] = ()
    topics: tuple[TopicSlot, ...] = ()

    def __post_init__(self) -> None:
        addrs = tuple(_normalize_address(a) for a in self.addresses)
        slots = tuple(_normalize_slot(s) for s in self.topics)
        if len(slots) > MAX_TOPIC_POSITIONS:
            raise ConfigError(f"At most {MAX_TOPIC_POSITIONS} topic positions, got {len(slots)}")
        object.__setattr__(self, "addresses", addrs)
        object.__setattr__(self, "topics", slots)

    @classmethod
    def for_events(cls, address: str | Sequence[str], topic0s: Sequence[str] = ()) -> "LogFilter":
        """Match any of `topic0s` (OR) emitted by `address`; no topic0s means every event."""
        addrs = (address,) if isinstance(address, str) else tuple(address)
        return cls(addresses=addrs, topics=(tuple(topic0s),) if topic0s else ())

    def bounded(self, from_block: int, to_block: int) -> FilterSpec:
        if from_block < 0 or to_block < from_block:
            raise ConfigError(f"Invalid block range [{from_block}, {to_block}]")
        return FilterSpec(self.addresses, self.topics, from_block, to_block)


@dataclass(slots=True, frozen=True)
class StreamConfig:
    after: int
    filter: LogFilter = field(default_factory=LogFilter)
    poll_interval: float = 5.0      # seconds between ticks
    confirmations: int = 12         # trailing blocks withheld as unconfirmed

    def __post_init__(self) -> None:
        if self.after < 0:
            raise ConfigError(f"after must be >= 0, got {self.after}")
        if self.confirmations < 0:
            raise ConfigError(f"confirmations must be >= 0, got {self.confirmations}")
        if self.poll_interval <= 0:
            raise ConfigError(f"poll_interval must be > 0, got {self.poll_interval}")


@dataclass(slots=True, frozen=True)
class LogStreamItem:
    from_block: int
    to_block: int
    logs: tuple[EventLog, ...] = ()

    @property
    def block_range(self) -> BlockRange:
        return BlockRange(self.from_block, self.to_block)


@dataclass(slots=True, frozen=True)
class CheckpointRec:
    from_block: int
    to_block: int
    logs: int = 0
    updated_at: float = 0.0
