from typing import List, Optional

from coreason_commit_gate.domain.commit_message import DEFAULT_HEADER_MAX_LENGTH, validate_commit_message
from coreason_commit_gate.domain.pipeline import GateContext, StepResult
from coreason_commit_gate.events import EventEmitter, EventType, GateEvent, LoguruEmitter
from coreason_commit_gate.exceptions import GitError
from coreason_commit_gate.utils.logger import logger
from coreason_commit_gate.utils.shell import CommandResult, ShellExecutor
from coreason_commit_gate.vcs.git import GitInterface


class CommandStep:
    """Step that runs an external tool and trusts its exit status."""

    def __init__(
        self,
        name: str,
        command: List[str],
        failure_message: str,
        remedy: Optional[str] = None,
        shell_executor: Optional[ShellExecutor] = None,
        timeout: Optional[float] = None,
        pass_files: bool = False,
        pass_message_path: bool = False,
        event_emitter: Optional[EventEmitter] = None,
    ):
        self.name = name
        self.command = command
        self.failure_message = failure_message
        self.remedy = remedy or " ".join(command)
        self.shell = shell_executor or ShellExecutor()
        self.timeout = timeout
        self.pass_files = pass_files
        self.pass_message_path = pass_message_path
        self.event_emitter = event_emitter or LoguruEmitter()

    def build_command(self, context: GateContext) -> List[str]:
        command = list(self.command)
        if self.pass_files:
            command.extend(context.staged_files)
        if self.pass_message_path and context.message_path is not None:
            command.append(str(context.message_path))
        return command

    def execute(self, context: GateContext) -> StepResult:
        command = self.build_command(context)
        self.event_emitter.emit(
            GateEvent(
                type=EventType.STEP_RUNNING,
                message=f"Running {self.name}",
                payload={"check": self.name, "command": command},
            )
        )
        result = self.shell.run(command, timeout=self.timeout)
        return self._report(result)

    def _report(self, result: CommandResult) -> StepResult:
        succeeded = result.exit_code == 0
        if succeeded:
            self.event_emitter.emit(
                GateEvent(
                    type=EventType.STEP_RESULT,
                    message=f"{self.name} passed",
                    payload={"check": self.name, "status": "pass"},
                )
            )
        else:
            self.event_emitter.emit(
                GateEvent(
                    type=EventType.STEP_RESULT,
                    message=f"{self.name} failed with exit code {result.exit_code}",
                    payload={"check": self.name, "status": "fail", "exit_code": result.exit_code},
                )
            )
        return StepResult(step_name=self.name, succeeded=succeeded, output=result.output, exit_code=result.exit_code)


class StagedFilesStep(CommandStep):
    """
    Auto-fixes staged files, then re-stages what the fixer touched.

    Only files that were staged and gained unstaged changes during the run are
    re-added, so pre-existing unstaged hunks of partially staged files stay out
    of the commit.
    """

    def __init__(
        self,
        command: List[str],
        git: GitInterface,
        restage_fixes: bool = True,
        shell_executor: Optional[ShellExecutor] = None,
        timeout: Optional[float] = None,
        pass_files: bool = False,
        event_emitter: Optional[EventEmitter] = None,
    ):
        super().__init__(
            name="staged-files",
            command=command,
            failure_message="Staged file fixups failed.",
            shell_executor=shell_executor,
            timeout=timeout,
            pass_files=pass_files,
            event_emitter=event_emitter,
        )
        self.git = git
        self.restage_fixes = restage_fixes

    def execute(self, context: GateContext) -> StepResult:
        if not context.staged_files:
            self.event_emitter.emit(
                GateEvent(
                    type=EventType.STEP_RESULT,
                    message=f"{self.name} skipped: no staged files",
                    payload={"check": self.name, "status": "skip"},
                )
            )
            return StepResult(step_name=self.name, succeeded=True, output="no staged files")

        try:
            dirty_before = set(self.git.unstaged_files()) if self.restage_fixes else set()
            result = super().execute(context)
            if result.succeeded and self.restage_fixes:
                dirty_after = set(self.git.unstaged_files())
                fixed = sorted((dirty_after - dirty_before) & set(context.staged_files))
                if fixed:
                    self.git.add(fixed)
        except GitError as e:
            logger.error(f"Re-staging fixups failed: {e}")
            self.event_emitter.emit(
                GateEvent(
                    type=EventType.STEP_RESULT,
                    message=f"{self.name} failed: {e}",
                    payload={"check": self.name, "status": "fail", "error": str(e)},
                )
            )
            return StepResult(step_name=self.name, succeeded=False, output=str(e), exit_code=1)

        return result


class ConventionalCommitStep:
    """Step that validates the commit message in-process."""

    def __init__(self, header_max_length: int = DEFAULT_HEADER_MAX_LENGTH, event_emitter: Optional[EventEmitter] = None):
        self.name = "commit-msg"
        self.failure_message = "Commit message format invalid."
        self.remedy = "commit-gate lint-msg <file>"
        self.header_max_length = header_max_length
        self.event_emitter = event_emitter or LoguruEmitter()

    def execute(self, context: GateContext) -> StepResult:
        self.event_emitter.emit(
            GateEvent(type=EventType.STEP_RUNNING, message="Validating commit message", payload={"check": self.name})
        )
        violations = validate_commit_message(context.message or "", self.header_max_length)

        if violations:
            self.event_emitter.emit(
                GateEvent(
                    type=EventType.STEP_RESULT,
                    message="Commit message format invalid",
                    payload={"check": self.name, "status": "fail", "violations": violations},
                )
            )
            return StepResult(step_name=self.name, succeeded=False, output="\n".join(violations), exit_code=1)

        self.event_emitter.emit(
            GateEvent(
                type=EventType.STEP_RESULT,
                message="Commit message valid",
                payload={"check": self.name, "status": "pass"},
            )
        )
        return StepResult(step_name=self.name, succeeded=True)
