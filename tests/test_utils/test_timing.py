"""Tests for timing utilities."""

import pytest
from loguru import logger

from ark.utils.timing import TimingMetrics, timed_section


class TestTimedSection:
    """Tests for timed_section()."""

    def test_records_elapsed_on_exit(self):
        with timed_section("create export20240315.zip") as timing:
            assert timing.elapsed_seconds == 0.0

        assert timing.name == "create export20240315.zip"
        assert timing.elapsed_seconds > 0

    def test_records_elapsed_when_block_raises(self):
        """A failed section still reports how long it ran."""
        with pytest.raises(OSError):
            with timed_section("create") as timing:
                raise OSError("disk full")

        assert timing.elapsed_seconds > 0


class TestTimingMetrics:
    """Tests for TimingMetrics."""

    def test_log_uses_requested_level(self):
        records = []
        logger.add(records.append, level="INFO", format="{level} {message}")

        TimingMetrics(name="rotation", elapsed_seconds=1.25).log(level="info")
        TimingMetrics(name="hidden", elapsed_seconds=0.5).log()

        assert records == ["INFO Timing [rotation]: 1.250s\n"]

    def test_to_dict(self):
        metrics = TimingMetrics(name="rotation", elapsed_seconds=2.0)
        assert metrics.to_dict() == {"name": "rotation", "elapsed_seconds": 2.0}
