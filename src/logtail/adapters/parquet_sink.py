from __future__ import annotations
import os, pyarrow as pa, pyarrow.parquet as pq
from typing import Iterable

from ..ports.storage import EventSink
from ..domain.models import EventLog

SCHEMA = pa.schema([
    ("address", pa.string()),
    ("topics", pa.list_(pa.string())),
    ("data_hex", pa.string()),
    ("block_number", pa.int64()),
    ("block_hash", pa.string()),
    ("tx_hash", pa.string()),
    ("log_index", pa.int64()),
    ("removed", pa.bool_()),
])

def _events_to_table(events: Iterable[EventLog]) -> pa.Table:
    evs = list(events)
    return pa.Table.from_arrays(
        arrays=[
            pa.array([e.address for e in evs], pa.string()),
            pa.array([list(e.topics) for e in evs], pa.list_(pa.string())),
            pa.array([e.data_hex for e in evs], pa.string()),
            pa.array([e.block_number for e in evs], pa.int64()),
            pa.array([e.block_hash for e in evs], pa.string()),
            pa.array([e.tx_hash for e in evs], pa.string()),
            pa.array([e.log_index for e in evs], pa.int64()),
            pa.array([e.removed for e in evs], pa.bool_()),
        ],
        schema=SCHEMA,
    )

class ParquetEventSink(EventSink):
    def __init__(self, root_dir: str, addr_slug: str, topics_fp: str) -> None:
        self.root = root_dir
        self.addr_slug = addr_slug
        self.topics_fp = topics_fp
        os.makedirs(self.root, exist_ok=True)

    def path_for(self, fb: int, tb: int) -> str:
        fname = f"{self.addr_slug}__topics-{self.topics_fp}__range_{fb}_{tb}.parquet"
        return os.path.join(self.root, fname)

    async def write_chunk(self, from_block: int, to_block: int, events: Iterable[EventLog]) -> None:
        path = self.path_for(from_block, to_block)
        tmp  = path + ".tmp"
        table = _events_to_table(events)
        pq.write_table(table, tmp, compression="snappy", use_dictionary=True)
        os.replace(tmp, path)
