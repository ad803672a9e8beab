import subprocess
from dataclasses import dataclass
from typing import List, Optional

from coreason_commit_gate.utils.logger import logger


@dataclass
class CommandResult:
    """Result of a shell command execution."""

    exit_code: int
    stdout: str
    stderr: str

    @property
    def output(self) -> str:
        """Combined stdout and stderr, stripped."""
        parts = [part.strip() for part in (self.stdout, self.stderr) if part and part.strip()]
        return "\n".join(parts)


class ShellError(RuntimeError):
    """Raised when a shell command fails."""

    def __init__(self, message: str, result: CommandResult):
        super().__init__(message)
        self.result = result


class ShellExecutor:
    """Executes shell commands, one at a time."""

    def run(
        self,
        command: List[str],
        timeout: Optional[float] = None,
        check: bool = False,
        cwd: Optional[str] = None,
    ) -> CommandResult:
        """
        Executes a shell command and blocks until it exits.

        Args:
            command: The command to execute as a list of arguments.
            timeout: Timeout in seconds. None waits forever.
            check: If True, raise ShellError if exit code is non-zero.
            cwd: Working directory for the command.

        Returns:
            CommandResult containing exit code, stdout, and stderr.
        """
        logger.debug(f"Executing: {' '.join(command)}")

        try:
            process = subprocess.run(
                command,
                capture_output=True,
                text=True,
                check=False,  # We handle check manually
                timeout=timeout,
                cwd=cwd,
            )
        except subprocess.TimeoutExpired as e:
            stdout = _decode(e.stdout)
            stderr = _decode(e.stderr) or f"Command timed out after {timeout}s"
            result = CommandResult(exit_code=-1, stdout=stdout, stderr=stderr)
            if check:
                raise ShellError(f"Command timed out: {' '.join(command)}", result) from e
            return result
        except OSError as e:
            # Missing executable, permission denied
            result = CommandResult(exit_code=-1, stdout="", stderr=str(e))
            if check:
                raise ShellError(f"Failed to execute command: {e}", result) from e
            return result

        result = CommandResult(exit_code=process.returncode, stdout=process.stdout, stderr=process.stderr)

        if check and result.exit_code != 0:
            error_msg = f"Command failed with exit code {result.exit_code}"
            if result.stderr:
                error_msg += f": {result.stderr.strip()}"
            elif result.stdout:
                error_msg += f": {result.stdout.strip()}"
            raise ShellError(error_msg, result)

        return result


def _decode(data: object) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode(errors="replace")
    return str(data)
