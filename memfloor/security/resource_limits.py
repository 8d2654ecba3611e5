"""Resource limiting utilities for subprocess execution."""

import resource
from collections.abc import Callable

from memfloor.limits.bounds import address_space_resource


def create_resource_limiter(limit: int) -> Callable[[], None]:
    """Create preexec_fn that caps the child's address space.

    The returned callable runs in the forked child before exec. It sets both
    the soft and the hard limit, so the target cannot raise it back.

    Args:
        limit: Address-space limit in bytes.

    Returns:
        Callable to use as preexec_fn in subprocess.
    """
    rlimit = address_space_resource()
    # Built up front: after setrlimit the child may not be able to allocate.
    limits = (limit, limit)

    def set_limits() -> None:
        """Set resource limits for the subprocess."""
        resource.setrlimit(rlimit, limits)

    return set_limits
