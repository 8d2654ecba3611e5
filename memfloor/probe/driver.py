"""Binary search for the smallest sufficient limit."""

from collections.abc import Callable

import structlog

from memfloor.limits.bounds import ProbeRange
from memfloor.limits.rounding import round_up
from memfloor.probe.outcome import ProbeOutcome

logger = structlog.get_logger()

# First candidate for 64-bit ranges: slightly above what 64-bit
# AddressSanitizer builds reserve up front.
SHORTCUT_CANDIDATE = 1 << 45
SHORTCUT_MIN_HIGH_BITS = 46

ProbeFn = Callable[[int], ProbeOutcome]
ProbeCallback = Callable[[int, ProbeOutcome], None]


class BinarySearchDriver:
    """Narrows a ProbeRange until it collapses to the minimal limit.

    Assumes the target is monotonic in the limit: if it succeeds under x it
    succeeds under every y >= x. Each iteration probes one candidate m with
    low <= m < high; success moves high down to m, any failure moves low up
    to m + 1. Probes run strictly one at a time.

    With a granularity above 1 the loop stops once low and high round to the
    same multiple, since finer probing cannot change the reported value.
    """

    def __init__(
        self,
        probe: ProbeFn,
        granularity: int = 1,
        shortcut: bool = True,
        on_probe: ProbeCallback | None = None,
    ) -> None:
        """Initialize driver.

        Args:
            probe: Runs the target under a candidate limit.
            granularity: Power-of-two resolution of the result.
            shortcut: Whether to use the fixed first candidate on 64-bit ranges.
            on_probe: Called with every candidate and its outcome.
        """
        self.probe = probe
        self.granularity = granularity
        self.shortcut = shortcut
        self.on_probe = on_probe
        self.iterations = 0

    def next_candidate(self, probe_range: ProbeRange) -> int:
        """Choose the next limit to probe within [low, high)."""
        low, high = probe_range.low, probe_range.high
        if self.shortcut and low == 1 and high >> SHORTCUT_MIN_HIGH_BITS:
            return SHORTCUT_CANDIDATE
        return low + (high - low) // 2

    def converged(self, probe_range: ProbeRange) -> bool:
        """True once low and high are indistinguishable at the granularity."""
        if probe_range.low == probe_range.high:
            return True
        return round_up(probe_range.low, self.granularity) >= round_up(
            probe_range.high, self.granularity
        )

    def step(self, probe_range: ProbeRange) -> ProbeOutcome:
        """Probe one candidate and narrow the range in place."""
        candidate = self.next_candidate(probe_range)
        outcome = self.probe(candidate)
        self.iterations += 1

        logger.debug(
            "probe_completed",
            iteration=self.iterations,
            candidate=candidate,
            outcome=outcome.describe(),
            low=probe_range.low,
            high=probe_range.high,
        )

        if self.on_probe is not None:
            self.on_probe(candidate, outcome)

        if outcome.ok:
            probe_range.high = candidate
        else:
            probe_range.low = candidate + 1
        return outcome

    def search(self, probe_range: ProbeRange) -> int:
        """Run the search to convergence.

        Args:
            probe_range: Initial range; narrowed in place.

        Returns:
            Smallest succeeding limit, rounded up to the granularity.

        Raises:
            ValueError: If the range starts at 0.
        """
        if probe_range.low < 1:
            raise ValueError("probe range must start at 1 or above")

        self.iterations = 0
        while not self.converged(probe_range):
            self.step(probe_range)

        result = round_up(probe_range.low, self.granularity)
        logger.info("search_converged", iterations=self.iterations, limit=result)
        return result
