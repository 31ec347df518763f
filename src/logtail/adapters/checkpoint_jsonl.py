# logtail/adapters/checkpoint_jsonl.py
from __future__ import annotations
import os, json, asyncio
from dataclasses import asdict

from loguru import logger

from ..ports.storage import CheckpointSink
from ..domain.models import CheckpointRec


class JSONLCheckpoint(CheckpointSink):
    """
    One fsynced JSONL line per delivered range. The resume cursor is the highest
    `to_block` across readable lines; unreadable lines are skipped with a warning.
    """
    def __init__(self, path: str) -> None:
        self.path = path
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        self._lock = asyncio.Lock()

    async def append(self, rec: CheckpointRec) -> None:
        line = json.dumps(asdict(rec), separators=(",", ":")) + "\n"
        async with self._lock:
            await asyncio.to_thread(self._write_line, self.path, line)

    @staticmethod
    def _write_line(path: str, line: str) -> None:
        with open(path, "a", buffering=1) as f:
            f.write(line); f.flush(); os.fsync(f.fileno())

    def last_cursor(self) -> int | None:
        if not os.path.isfile(self.path):
            return None
        best: int | None = None
        with open(self.path, "r") as f:
            for lineno, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    tb = int(json.loads(line)["to_block"])
                except (ValueError, KeyError, TypeError) as e:
                    logger.warning(f"[Checkpoint] skipping {self.path}:{lineno}: {e}")
                    continue
                best = tb if best is None else max(best, tb)
        return best
