"""Unit tests for initial search bounds."""

import resource
from unittest.mock import patch

import pytest

from memfloor.config.models import ReportingUnit
from memfloor.errors import EnvironmentFault
from memfloor.limits.bounds import (
    X86_ADDRESS_SPACE_MAX,
    ProbeRange,
    clamp_limit,
    hard_limit,
    initial_range,
    page_size,
    search_granularity,
)
from memfloor.limits.rounding import LIMIT_MAX


class TestProbeRange:
    """Test ProbeRange invariants."""

    def test_valid_range(self) -> None:
        """Test creating a valid range."""
        probe_range = ProbeRange(low=1, high=100)
        assert probe_range.low == 1
        assert probe_range.high == 100

    def test_collapsed_range_allowed(self) -> None:
        """Test that low == high is a valid (finished) range."""
        ProbeRange(low=7, high=7)

    def test_inverted_range_rejected(self) -> None:
        """Test that low > high is rejected."""
        with pytest.raises(ValueError, match="invalid probe range"):
            ProbeRange(low=10, high=5)

    def test_negative_low_rejected(self) -> None:
        """Test that negative bounds are rejected."""
        with pytest.raises(ValueError):
            ProbeRange(low=-1, high=5)


class TestClampLimit:
    """Test clamping of the OS-reported hard limit."""

    def test_infinity_on_x86_64(self) -> None:
        """Test that an unlimited hard limit is clamped to 48 bits on x86-64."""
        assert clamp_limit(resource.RLIM_INFINITY, machine="x86_64") == X86_ADDRESS_SPACE_MAX

    def test_infinity_elsewhere(self) -> None:
        """Test that an unlimited hard limit becomes the representable maximum."""
        assert clamp_limit(resource.RLIM_INFINITY, machine="aarch64") == LIMIT_MAX

    def test_negative_treated_as_infinity(self) -> None:
        """Test that -1 is treated as unlimited."""
        assert clamp_limit(-1, machine="aarch64") == LIMIT_MAX

    def test_finite_limit_kept(self) -> None:
        """Test that a finite hard limit below the clamps is kept."""
        assert clamp_limit(8 * 1024**3, machine="x86_64") == 8 * 1024**3
        assert clamp_limit(8 * 1024**3, machine="aarch64") == 8 * 1024**3

    def test_machine_name_case_insensitive(self) -> None:
        """Test that Windows-style AMD64 is recognised as x86."""
        assert clamp_limit(-1, machine="AMD64") == X86_ADDRESS_SPACE_MAX


class TestInitialRange:
    """Test building the initial probe range."""

    def test_from_explicit_hard_limit(self) -> None:
        """Test range from a given hard limit."""
        probe_range = initial_range(hard=1 << 30, machine="x86_64")
        assert probe_range.low == 1
        assert probe_range.high == 1 << 30

    @patch("memfloor.limits.bounds.resource.getrlimit")
    def test_reads_process_limit(self, mock_getrlimit) -> None:
        """Test that the hard limit is read from the process when not given."""
        mock_getrlimit.return_value = (1 << 20, 1 << 32)

        probe_range = initial_range(machine="x86_64")

        assert probe_range.high == 1 << 32
        mock_getrlimit.assert_called_once()

    def test_nothing_to_probe(self) -> None:
        """Test that a hard limit of 1 byte aborts."""
        with pytest.raises(EnvironmentFault, match="getrlimit"):
            initial_range(hard=1, machine="x86_64")


class TestSystemQueries:
    """Test getrlimit and sysconf wrappers."""

    @patch("memfloor.limits.bounds.resource.getrlimit")
    def test_getrlimit_failure(self, mock_getrlimit) -> None:
        """Test that getrlimit errors become environment faults."""
        mock_getrlimit.side_effect = OSError(22, "Invalid argument")

        with pytest.raises(EnvironmentFault) as exc_info:
            hard_limit()

        assert exc_info.value.operation == "getrlimit"

    def test_page_size_positive(self) -> None:
        """Test that the real page size is a positive power of two."""
        size = page_size()
        assert size > 0
        assert size & (size - 1) == 0

    @patch("memfloor.limits.bounds.os.sysconf")
    def test_page_size_failure(self, mock_sysconf) -> None:
        """Test that sysconf errors become environment faults."""
        mock_sysconf.side_effect = ValueError("unrecognized configuration name")

        with pytest.raises(EnvironmentFault, match="SC_PAGESIZE"):
            page_size()


def test_search_granularity() -> None:
    """Test that the coarser of page size and unit wins."""
    assert search_granularity(ReportingUnit.BYTE, 4096) == 4096
    assert search_granularity(ReportingUnit.KILOBYTE, 4096) == 4096
    assert search_granularity(ReportingUnit.MEGABYTE, 4096) == 1024 * 1024
    assert search_granularity(ReportingUnit.KILOBYTE, 512) == 1024
