"""Child-process limits and command validation for memfloor."""

from memfloor.security.resource_limits import create_resource_limiter
from memfloor.security.validation import resolve_command

__all__ = [
    "create_resource_limiter",
    "resolve_command",
]
