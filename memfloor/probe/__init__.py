"""Probing engine: outcomes, stdin replica, child launcher and search driver."""

from memfloor.probe.driver import BinarySearchDriver
from memfloor.probe.launcher import ChildLauncher
from memfloor.probe.outcome import OutcomeKind, ProbeOutcome
from memfloor.probe.replica import InputReplica, capture_stdin

__all__ = [
    "BinarySearchDriver",
    "ChildLauncher",
    "InputReplica",
    "OutcomeKind",
    "ProbeOutcome",
    "capture_stdin",
]
