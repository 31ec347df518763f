from __future__ import annotations

from dataclasses import dataclass

from .domain.models import LogFilter, StreamConfig
from .errors import ConfigError


@dataclass(frozen=True)
class WatchConfig:
    """Configuration for `logtail watch`."""

    rpc_url: str
    address: str
    topic0s: tuple[str, ...] = ()
    after: int = 0
    confirmations: int = 12
    poll_interval: float = 5.0
    timeout_s: int = 20
    checkpoint_path: str = ""    # JSONL; resumes from the highest recorded to_block
    out_dir: str = ""            # Parquet file per non-empty range
    max_items: int = 0           # 0 = run until interrupted

    def __post_init__(self) -> None:
        if not self.rpc_url:
            raise ConfigError("rpc_url is required")
        if self.max_items < 0:
            raise ConfigError(f"max_items must be >= 0, got {self.max_items}")

    def log_filter(self) -> LogFilter:
        return LogFilter.for_events(self.address, self.topic0s)

    def stream_config(self, after: int | None = None) -> StreamConfig:
        return StreamConfig(
            after=self.after if after is None else after,
            filter=self.log_filter(),
            poll_interval=self.poll_interval,
            confirmations=self.confirmations,
        )
