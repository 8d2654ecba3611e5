"""Fault hierarchy for memfloor.

Probe failures (nonzero exit, signal termination) are not errors: they are
ordinary outcomes that drive the search. The exceptions here cover the cases
where the measurement itself cannot be trusted and the tool has to stop.
"""


class MemfloorError(RuntimeError):
    """Base class for fatal memfloor faults.

    Attributes:
        operation: Name of the operation that failed (e.g. "getrlimit").
        detail: Human-readable description of the failure.
    """

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation}: {detail}")


class EnvironmentFault(MemfloorError):
    """The environment refused an operation the search depends on.

    Raised when resource limits cannot be queried, temporary storage cannot be
    created, standard input cannot be read, or a child cannot be spawned or
    waited for.
    """


class HarnessFault(MemfloorError):
    """Setting up the child failed after fork but before exec."""


class CommandLaunchError(MemfloorError):
    """The target command cannot be executed at all."""
