# logtail/errors.py
from __future__ import annotations


class LogTailError(Exception):
    """Base class for every error raised by logtail."""


class ConfigError(LogTailError, ValueError):
    """Invalid stream, filter or CLI configuration."""


class RPCError(LogTailError):
    """Transport or JSON-RPC protocol failure reported by the node client."""

    def __init__(self, message: str, *, method: str | None = None, code: int | None = None) -> None:
        super().__init__(message)
        self.method = method
        self.code = code


class TickerError(LogTailError):
    """The interval timer driving a stream failed."""
