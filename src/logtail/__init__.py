"""logtail: confirmed, checkpointed streams of contract event logs.

Public entry points:
- LogStream / log_stream: async iterator of confirmed block ranges and their logs
- LogFilter, StreamConfig, LogStreamItem: stream configuration and output
- HttpxRPC, IntervalTicker: bundled node client and timer
"""

from logtail.adapters.interval_ticker import IntervalTicker
from logtail.adapters.rpc_httpx import HttpxRPC
from logtail.application.log_stream import LogStream, log_stream
from logtail.application.planning import confirmed_height, plan_range
from logtail.domain.models import EventLog, FilterSpec, LogFilter, LogStreamItem, StreamConfig
from logtail.errors import ConfigError, LogTailError, RPCError, TickerError

__all__ = [
    "ConfigError",
    "EventLog",
    "FilterSpec",
    "HttpxRPC",
    "IntervalTicker",
    "LogFilter",
    "LogStream",
    "LogStreamItem",
    "LogTailError",
    "RPCError",
    "StreamConfig",
    "TickerError",
    "confirmed_height",
    "log_stream",
    "plan_range",
]
