"""Validation of the target command before probing."""

import os
import shutil
from pathlib import Path


def resolve_command(command: str, search_path: str | None = None) -> Path:
    """Resolve the command the way exec would find it.

    Args:
        command: Command name or path (argv[0] of the target).
        search_path: PATH-style lookup string; defaults to $PATH.

    Returns:
        Absolute path to the executable.

    Raises:
        ValueError: If the command is empty, not found, not a regular file,
            or not executable.
    """
    if not command:
        raise ValueError("Command is empty")

    if "\x00" in command:
        raise ValueError("Command contains null bytes which are not allowed")

    if os.sep in command:
        path = Path(command)

        if not path.exists():
            raise ValueError(f"{command}: No such file or directory")

        # Verify is a file (not a directory)
        if not path.is_file():
            raise ValueError(f"{command}: Not a regular file")

        if not os.access(path, os.X_OK):
            raise ValueError(f"{command}: Permission denied")

        return path.resolve()

    found = shutil.which(command, path=search_path)
    if found is None:
        raise ValueError(f"{command}: command not found")

    return Path(found).resolve()
