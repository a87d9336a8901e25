from __future__ import annotations

from time import sleep

import pytest

from pool_bench.utils.profiler import profile_block

SLEEP_SECONDS = 0.05


def test_profile_block_measures_time_and_memory() -> None:
    with profile_block("sleep") as stats:
        sleep(SLEEP_SECONDS)

    assert stats.label == "sleep"
    assert stats.duration_seconds >= SLEEP_SECONDS
    assert stats.end_ts > stats.start_ts
    assert stats.peak_rss_bytes and stats.peak_rss_bytes > 0
    assert isinstance(stats.cpu_percent, float)


def test_profile_block_records_duration_when_block_raises() -> None:
    with pytest.raises(RuntimeError):
        with profile_block("boom") as stats:
            raise RuntimeError("boom")

    assert stats.duration_seconds >= 0
    assert stats.peak_rss_bytes is not None
