"""Tests for filter and stream configuration validation."""

from __future__ import annotations

import pytest

from logtail.domain.models import LogFilter, LogStreamItem, StreamConfig
from logtail.errors import ConfigError

from conftest import ADDRESS, TOPIC0


def test_log_filter_normalizes_case() -> None:
    f = LogFilter.for_events(ADDRESS.upper().replace("0X", "0x"), [TOPIC0.upper().replace("0X", "0x")])
    assert f.addresses == (ADDRESS,)
    assert f.topics == ((TOPIC0,),)


def test_log_filter_without_topics_matches_all_events() -> None:
    f = LogFilter.for_events(ADDRESS)
    assert f.topics == ()


def test_log_filter_wildcard_positions() -> None:
    f = LogFilter(addresses=(ADDRESS,), topics=(TOPIC0, None, [TOPIC0, "0x" + "22" * 32]))
    assert f.topics[0] == (TOPIC0,)
    assert f.topics[1] is None
    assert len(f.topics[2]) == 2


@pytest.mark.parametrize("addr", ["", "0x1234", "not-an-address", "0x" + "zz" * 20])
def test_log_filter_rejects_bad_address(addr: str) -> None:
    with pytest.raises(ConfigError):
        LogFilter.for_events(addr, [TOPIC0])


@pytest.mark.parametrize("topic", ["0x1234", "11" * 32, "0x" + "gg" * 32])
def test_log_filter_rejects_bad_topic(topic: str) -> None:
    with pytest.raises(ConfigError):
        LogFilter.for_events(ADDRESS, [topic])


def test_log_filter_rejects_too_many_positions() -> None:
    with pytest.raises(ConfigError):
        LogFilter(topics=(None, None, None, None, None))


def test_bounded_keeps_predicate_and_sets_range(log_filter: LogFilter) -> None:
    spec = log_filter.bounded(101, 105)
    assert spec.addresses == log_filter.addresses
    assert spec.topics == log_filter.topics
    assert (spec.from_block, spec.to_block) == (101, 105)


def test_bounded_rejects_inverted_range(log_filter: LogFilter) -> None:
    with pytest.raises(ConfigError):
        log_filter.bounded(10, 9)


def test_config_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        StreamConfig(after=-1)


@pytest.mark.parametrize("kwargs", [{"confirmations": -1}, {"poll_interval": 0}, {"poll_interval": -2.5}])
def test_stream_config_validation(kwargs: dict) -> None:
    with pytest.raises(ConfigError):
        StreamConfig(after=0, **kwargs)


def test_item_block_range() -> None:
    item = LogStreamItem(101, 105)
    assert item.logs == ()
    assert item.block_range.span() == 5
