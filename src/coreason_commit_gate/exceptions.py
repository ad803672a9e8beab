from typing import List, Optional

from coreason_commit_gate.utils.shell import CommandResult


class CommitGateError(Exception):
    """Base exception for Coreason Commit Gate."""

    pass


class StepFailure(CommitGateError):
    """Exception raised when one of the gate checks fails."""

    def __init__(self, step: str, message: str, exit_code: int = 1, output: str = "") -> None:
        super().__init__(f"{step}: {message}")
        self.step = step
        self.message = message
        self.exit_code = exit_code
        self.output = output


class GitError(CommitGateError):
    """Exception raised when a git command fails."""

    def __init__(self, message: str, result: Optional[CommandResult] = None) -> None:
        super().__init__(message)
        self.result = result


class HookInstallError(CommitGateError):
    """Exception raised when hooks cannot be installed or removed."""

    pass


class CommitMessageError(CommitGateError):
    """Exception raised when a commit message breaks the conventional format."""

    def __init__(self, violations: List[str]) -> None:
        super().__init__("; ".join(violations))
        self.violations = violations
