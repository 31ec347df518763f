"""Tests for the Parquet range sink."""

from __future__ import annotations

import os

import pyarrow.parquet as pq
import pytest

from logtail.adapters.parquet_sink import SCHEMA, ParquetEventSink

from conftest import ADDRESS, TOPIC0, make_log


@pytest.mark.asyncio
async def test_write_chunk_roundtrips_columns(tmp_path) -> None:
    sink = ParquetEventSink(str(tmp_path / "out"), ADDRESS, "fp")
    logs = [make_log(101, 0), make_log(101, 1), make_log(103)]

    await sink.write_chunk(101, 105, logs)

    path = sink.path_for(101, 105)
    assert os.path.basename(path) == f"{ADDRESS}__topics-fp__range_101_105.parquet"
    assert not os.path.exists(path + ".tmp")
    table = pq.read_table(path)
    assert table.column_names == SCHEMA.names
    assert table["block_number"].to_pylist() == [101, 101, 103]
    assert table["log_index"].to_pylist() == [0, 1, 0]
    assert table["topics"].to_pylist()[0] == [TOPIC0]


@pytest.mark.asyncio
async def test_write_empty_chunk(tmp_path) -> None:
    sink = ParquetEventSink(str(tmp_path), ADDRESS, "fp")
    await sink.write_chunk(1, 2, [])
    assert pq.read_table(sink.path_for(1, 2)).num_rows == 0
