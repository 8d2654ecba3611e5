"""Outcome of a single probe."""

import os
import signal
from dataclasses import dataclass
from enum import Enum


class OutcomeKind(str, Enum):
    """How a probed child terminated."""

    SUCCESS = "success"
    EXITED = "exited"
    SIGNALED = "signaled"
    EXEC_FAILED = "exec_failed"


@dataclass(frozen=True)
class ProbeOutcome:
    """Tagged result of one probe.

    Attributes:
        kind: Termination category.
        code: Exit status (EXITED) or errno (EXEC_FAILED).
        signal: Terminating signal number (SIGNALED).
    """

    kind: OutcomeKind
    code: int | None = None
    signal: int | None = None

    @classmethod
    def success(cls) -> "ProbeOutcome":
        return cls(OutcomeKind.SUCCESS)

    @classmethod
    def exited(cls, code: int) -> "ProbeOutcome":
        return cls(OutcomeKind.EXITED, code=code)

    @classmethod
    def signaled(cls, signum: int) -> "ProbeOutcome":
        return cls(OutcomeKind.SIGNALED, signal=signum)

    @classmethod
    def exec_failed(cls, errno_num: int) -> "ProbeOutcome":
        return cls(OutcomeKind.EXEC_FAILED, code=errno_num)

    @classmethod
    def from_returncode(cls, returncode: int) -> "ProbeOutcome":
        """Build an outcome from a subprocess return code.

        Negative return codes mean the child was killed by a signal.
        """
        if returncode == 0:
            return cls.success()
        if returncode < 0:
            return cls.signaled(-returncode)
        return cls.exited(returncode)

    @property
    def ok(self) -> bool:
        """True if the command succeeded under the candidate limit."""
        return self.kind is OutcomeKind.SUCCESS

    def describe(self) -> str:
        """Human-readable classification for diagnostics."""
        if self.kind is OutcomeKind.SUCCESS:
            return "ok"
        if self.kind is OutcomeKind.EXITED:
            return f"exit status {self.code}"
        if self.kind is OutcomeKind.EXEC_FAILED:
            return f"exec failed: {os.strerror(self.code or 0)}"
        return signal_name(self.signal or 0)


def signal_name(signum: int) -> str:
    """Return the symbolic name of a signal, or a numbered description."""
    try:
        return signal.Signals(signum).name
    except ValueError:
        pass
    try:
        description = signal.strsignal(signum)
    except ValueError:
        description = None
    return f"signal {signum} ({description or 'unknown signal'})"
