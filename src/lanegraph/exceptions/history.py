"""History source exceptions: git invocation and input files."""

from pathlib import Path
from typing import List, Union

from .base import LaneGraphError


class HistorySourceError(LaneGraphError):
    """Base class for errors while reading commit history."""

    pass


class GitCommandError(HistorySourceError):
    """Raised when a git subprocess exits with an error."""

    def __init__(self, command: List[str], returncode: int, stderr: str):
        super().__init__(
            f"git command failed: {' '.join(command)}",
            details={"returncode": str(returncode), "stderr": stderr.strip()[:200]},
        )
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class HistoryFormatError(HistorySourceError):
    """Raised when a history input file cannot be parsed."""

    def __init__(self, source: Union[str, Path], reason: str):
        super().__init__(
            f"Malformed history input: {source}",
            details={"source": str(source), "reason": reason},
        )
        self.source = source
        self.reason = reason
