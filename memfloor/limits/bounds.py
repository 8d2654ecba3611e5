"""Initial search bounds for the address-space limit."""

import os
import platform
import resource
from dataclasses import dataclass

import structlog

from memfloor.config.models import ReportingUnit
from memfloor.errors import EnvironmentFault
from memfloor.limits.rounding import LIMIT_MAX

logger = structlog.get_logger()

# x86-64 rlim_t is 64 bits wide but user space only gets 48 bits of it.
X86_ADDRESS_SPACE_MAX = 1 << 48

X86_MACHINES = frozenset({"x86_64", "amd64", "i386", "i486", "i586", "i686", "x86"})


@dataclass
class ProbeRange:
    """Half-open search range for the minimal limit.

    Every value below low is known to fail; high is assumed (or proven) to
    succeed.

    Attributes:
        low: Smallest value not yet known to fail.
        high: Smallest value known or assumed to succeed.
    """

    low: int
    high: int

    def __post_init__(self) -> None:
        if not 0 <= self.low <= self.high:
            raise ValueError(f"invalid probe range [{self.low}, {self.high}]")


def address_space_resource() -> int:
    """Return the resource constant that bounds the address space."""
    return getattr(resource, "RLIMIT_AS", resource.RLIMIT_DATA)


def hard_limit() -> int:
    """Read the hard address-space limit of this process.

    Returns:
        Hard limit in bytes, or resource.RLIM_INFINITY.

    Raises:
        EnvironmentFault: If getrlimit fails.
    """
    try:
        _soft, hard = resource.getrlimit(address_space_resource())
    except (OSError, ValueError) as e:
        raise EnvironmentFault("getrlimit", str(e)) from e
    return hard


def page_size() -> int:
    """Return the system page size in bytes.

    Raises:
        EnvironmentFault: If sysconf fails.
    """
    try:
        size = os.sysconf("SC_PAGESIZE")
    except (OSError, ValueError) as e:
        raise EnvironmentFault("sysconf(SC_PAGESIZE)", str(e)) from e
    if size <= 0:
        raise EnvironmentFault("sysconf(SC_PAGESIZE)", f"bad page size {size}")
    return size


def clamp_limit(hard: int, machine: str | None = None) -> int:
    """Clamp a hard limit to a value the search can work with.

    Args:
        hard: Hard limit as reported by getrlimit.
        machine: Machine name; defaults to platform.machine().

    Returns:
        Upper search bound in bytes.
    """
    if machine is None:
        machine = platform.machine()

    if hard == resource.RLIM_INFINITY or hard < 0 or hard > LIMIT_MAX:
        upper = LIMIT_MAX
    else:
        upper = hard

    if machine.lower() in X86_MACHINES and upper > X86_ADDRESS_SPACE_MAX:
        upper = X86_ADDRESS_SPACE_MAX

    return upper


def initial_range(hard: int | None = None, machine: str | None = None) -> ProbeRange:
    """Build the initial probe range.

    Args:
        hard: Hard limit; read from the process when None.
        machine: Machine name; defaults to platform.machine().

    Returns:
        ProbeRange with low=1 and the clamped hard limit as high.

    Raises:
        EnvironmentFault: If the limit cannot be read or leaves nothing to search.
    """
    if hard is None:
        hard = hard_limit()

    high = clamp_limit(hard, machine)
    if high <= 1:
        raise EnvironmentFault("getrlimit", f"hard limit {hard} leaves nothing to probe")

    logger.debug("initial_range", low=1, high=high, hard_limit=hard)
    return ProbeRange(low=1, high=high)


def search_granularity(unit: ReportingUnit, page: int) -> int:
    """Return the resolution the search stops at.

    Limits finer than a page are not distinguishable, so the coarser of the
    page size and the reporting unit wins.
    """
    return max(page, unit.size)
