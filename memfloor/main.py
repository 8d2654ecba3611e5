"""Probe session: wires configuration, input, launcher and search together."""

import os
from collections.abc import Sequence
from contextlib import ExitStack

import structlog

from memfloor.config.models import MemfloorConfig
from memfloor.errors import CommandLaunchError, EnvironmentFault
from memfloor.limits.bounds import initial_range, page_size, search_granularity
from memfloor.probe.driver import BinarySearchDriver, ProbeCallback, ProbeFn
from memfloor.probe.launcher import ChildLauncher
from memfloor.probe.outcome import ProbeOutcome
from memfloor.probe.replica import InputReplica, capture_stdin
from memfloor.security.validation import resolve_command

logger = structlog.get_logger()


class ProbeSession:
    """One measurement of a command's minimal address-space limit.

    Responsible for:
    - Resolving the target command up front
    - Preparing the shared input (stdin replica or /dev/null)
    - Preparing the output sink (/dev/null unless output passthrough is on)
    - Reading the initial range and page size
    - Running the binary search and converting the result to the unit
    """

    def __init__(
        self,
        command: Sequence[str],
        config: MemfloorConfig,
        stdin_fd: int = 0,
        on_probe: ProbeCallback | None = None,
    ) -> None:
        """Initialize session.

        Args:
            command: Target command and its arguments.
            config: memfloor configuration.
            stdin_fd: Descriptor captured when stdin replay is enabled.
            on_probe: Called with every candidate and its outcome.
        """
        if not command:
            raise ValueError("command must not be empty")

        self.command = list(command)
        self.config = config
        self.stdin_fd = stdin_fd
        self.on_probe = on_probe
        self.logger = logger.bind(command=self.command[0])

        self.replica: InputReplica | None = None

    def run(self) -> int:
        """Run the search.

        Returns:
            Minimal limit expressed in the configured unit.

        Raises:
            CommandLaunchError: If the command cannot be executed.
            EnvironmentFault: If a system call the search relies on fails.
            HarnessFault: If a child could not be set up.
        """
        probe_config = self.config.probe
        self.replica = None

        try:
            executable = resolve_command(self.command[0])
        except ValueError as e:
            raise CommandLaunchError("exec", str(e)) from e

        self.logger.info(
            "session_starting",
            executable=str(executable),
            unit=probe_config.unit.value,
            capture_stdin=probe_config.capture_stdin,
        )

        with ExitStack() as stack:
            null_fd = self._open_devnull()
            stack.callback(os.close, null_fd)

            if probe_config.capture_stdin:
                self.replica = stack.enter_context(
                    capture_stdin(self.stdin_fd, self.config.tmpdir)
                )
                input_fd = self.replica.fd
            else:
                input_fd = null_fd

            output_fd = None if probe_config.passthrough_output else null_fd

            probe_range = initial_range()
            granularity = search_granularity(probe_config.unit, page_size())

            launcher = ChildLauncher(self.command, stdin_fd=input_fd, output_fd=output_fd)
            driver = BinarySearchDriver(
                self._make_probe(launcher),
                granularity=granularity,
                shortcut=probe_config.shortcut,
                on_probe=self.on_probe,
            )

            limit = driver.search(probe_range)

        result = limit // probe_config.unit.size
        self.logger.info(
            "session_finished",
            limit_bytes=limit,
            result=result,
            iterations=driver.iterations,
        )
        return result

    def _make_probe(self, launcher: ChildLauncher) -> ProbeFn:
        """Build the probe function for the driver."""

        def probe(candidate: int) -> ProbeOutcome:
            if self.replica is not None:
                self.replica.rewind()
            return launcher.launch(candidate)

        return probe

    @staticmethod
    def _open_devnull() -> int:
        try:
            return os.open(os.devnull, os.O_RDWR)
        except OSError as e:
            raise EnvironmentFault(os.devnull, e.strerror or str(e)) from e
