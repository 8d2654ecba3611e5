"""Launching the target command under a candidate limit."""

import errno
import os
import subprocess
from collections.abc import Sequence

import structlog

from memfloor.errors import CommandLaunchError, EnvironmentFault, HarnessFault
from memfloor.probe.outcome import ProbeOutcome
from memfloor.security.resource_limits import create_resource_limiter

logger = structlog.get_logger()

# exec errors that no limit can fix.
UNRUNNABLE_ERRNOS = frozenset(
    {
        errno.ENOENT,
        errno.ENOTDIR,
        errno.EACCES,
        errno.EPERM,
        errno.ENOEXEC,
        errno.ELOOP,
        errno.ENAMETOOLONG,
        errno.EISDIR,
    }
)


class ChildLauncher:
    """Runs the target command once per probe.

    The child applies the candidate as its hard and soft address-space
    limit, takes stdin_fd as standard input and output_fd as both standard
    output and standard error, then execs the command. None for either
    descriptor means inherit.

    A failure while setting up the child is reported back through the
    exec-status pipe of subprocess and raised here as HarnessFault, so it is
    never mistaken for the command failing under the limit.
    """

    def __init__(
        self,
        command: Sequence[str],
        stdin_fd: int | None = None,
        output_fd: int | None = None,
    ) -> None:
        """Initialize launcher.

        Args:
            command: Target command and its arguments.
            stdin_fd: Descriptor to use as the child's stdin.
            output_fd: Descriptor to use as the child's stdout and stderr.
        """
        if not command:
            raise ValueError("command must not be empty")

        self.command = list(command)
        self.stdin_fd = stdin_fd
        self.output_fd = output_fd
        self.logger = logger.bind(command=self.command[0])

    def launch(self, limit: int) -> ProbeOutcome:
        """Run the command under limit and wait for it.

        Args:
            limit: Address-space limit in bytes.

        Returns:
            Outcome of the run.

        Raises:
            HarnessFault: If applying the limit or redirecting streams failed.
            CommandLaunchError: If the command cannot be executed at all.
            EnvironmentFault: If the child cannot be spawned or waited for.
        """
        preexec_fn = create_resource_limiter(limit)

        try:
            proc = subprocess.Popen(
                self.command,
                stdin=self.stdin_fd,
                stdout=self.output_fd,
                stderr=self.output_fd,
                preexec_fn=preexec_fn,
            )
        except subprocess.SubprocessError as e:
            # preexec_fn raised in the child
            self.logger.error("harness_setup_failed", limit=limit, error=str(e))
            raise HarnessFault("setrlimit", str(e)) from e
        except OSError as e:
            return self._classify_spawn_error(e, limit)

        try:
            returncode = proc.wait()
        except OSError as e:
            raise EnvironmentFault("wait", e.strerror or str(e)) from e

        outcome = ProbeOutcome.from_returncode(returncode)
        self.logger.debug("child_exited", limit=limit, pid=proc.pid, returncode=returncode)
        return outcome

    def _classify_spawn_error(self, e: OSError, limit: int) -> ProbeOutcome:
        """Sort a Popen OSError into a probe outcome or a fatal fault.

        subprocess attaches the executable name only to errors raised by exec
        itself; errors without one come from fork or from stream setup.
        """
        if e.filename is None:
            self.logger.error("spawn_failed", limit=limit, errno=e.errno, error=str(e))
            raise EnvironmentFault("spawn", e.strerror or str(e)) from e

        if e.errno in UNRUNNABLE_ERRNOS:
            reason = e.strerror or os.strerror(e.errno or 0)
            raise CommandLaunchError("exec", f"{self.command[0]}: {reason}") from e

        self.logger.debug("exec_failed", limit=limit, errno=e.errno)
        return ProbeOutcome.exec_failed(e.errno or 0)
