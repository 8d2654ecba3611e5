"""End-to-end tests running memfloor against real commands."""

import platform
import re
import subprocess
import sys

import pytest

from memfloor.limits.bounds import initial_range, page_size
from memfloor.limits.rounding import round_up

pytestmark = pytest.mark.skipif(platform.system() != "Linux", reason="Linux-specific test")


def run_memfloor(*args: str, input: bytes | None = None) -> subprocess.CompletedProcess:
    """Run the memfloor CLI in a fresh interpreter."""
    return subprocess.run(
        [sys.executable, "-m", "memfloor.cli.main", *args],
        input=input if input is not None else b"",
        capture_output=True,
        timeout=300,
    )


def upper_bound() -> int:
    """Result reported when every probe fails."""
    return round_up(initial_range().high, page_size())


class TestEndToEnd:
    """Whole-tool runs."""

    def test_true(self) -> None:
        """Test that true reports a positive, page-aligned limit below the bound."""
        result = run_memfloor("true")

        assert result.returncode == 0, result.stderr
        limit = int(result.stdout)
        assert 0 < limit < upper_bound()
        assert limit % page_size() == 0

    def test_true_in_megabytes(self) -> None:
        """Test megabyte reporting against byte reporting."""
        in_bytes = int(run_memfloor("true").stdout)
        in_megabytes = int(run_memfloor("-u", "M", "true").stdout)

        assert in_megabytes >= 1
        assert in_megabytes * 1024 * 1024 >= in_bytes

    def test_false_converges_to_bound(self) -> None:
        """Test that an always failing command terminates at the upper bound."""
        result = run_memfloor("false")

        assert result.returncode == 0, result.stderr
        assert int(result.stdout) == upper_bound()

    def test_captured_stdin_replayed(self) -> None:
        """Test that every probe sees exactly the piped 500 bytes."""
        result = run_memfloor(
            "-c", "sh", "-c", 'test "$(wc -c)" -eq 500', input=b"z" * 500
        )

        assert result.returncode == 0, result.stderr
        assert int(result.stdout) < upper_bound()

    def test_stdin_not_replayed_by_default(self) -> None:
        """Test that without -c the command reads /dev/null."""
        result = run_memfloor("sh", "-c", 'test "$(wc -c)" -eq 500', input=b"z" * 500)

        assert result.returncode == 0, result.stderr
        assert int(result.stdout) == upper_bound()

    def test_verbose_diagnostics(self) -> None:
        """Test one diagnostic line per probe on stderr."""
        result = run_memfloor("-v", "true")

        assert result.returncode == 0, result.stderr
        lines = result.stderr.decode().splitlines()
        assert lines
        pattern = re.compile(r"^memfloor: \d+ -> (ok|exit status \d+|SIG\w+|signal \d+ \(.*\)|exec failed: .+)$")
        for line in lines:
            assert pattern.match(line), line
        assert any(line.endswith("-> ok") for line in lines)

    def test_output_suppressed(self) -> None:
        """Test that the command's output is discarded unless -p is given."""
        quiet = run_memfloor("echo", "hello-from-target")
        assert b"hello-from-target" not in quiet.stdout

        loud = run_memfloor("-p", "echo", "hello-from-target")
        assert b"hello-from-target" in loud.stdout

    def test_allocation_in_megabytes_is_stable(self) -> None:
        """Test that a 10 MiB allocation gives the same answer on every run."""
        code = "b = bytearray(10 * 2**20); b[::4096] = b'x' * len(b[::4096])"

        first = run_memfloor("-u", "M", sys.executable, "-c", code)
        second = run_memfloor("-u", "M", sys.executable, "-c", code)

        assert first.returncode == 0, first.stderr
        assert second.returncode == 0, second.stderr
        assert first.stdout == second.stdout
        assert int(first.stdout) >= 10

    def test_missing_command(self) -> None:
        """Test that an unknown command aborts without a result."""
        result = run_memfloor("memfloor-no-such-command")

        assert result.returncode == 1
        assert result.stdout == b""
        assert b"command not found" in result.stderr
