from typing import List, Optional

from coreason_commit_gate.checks.steps import CommandStep, ConventionalCommitStep, StagedFilesStep
from coreason_commit_gate.config import Settings
from coreason_commit_gate.domain.pipeline import CheckStep
from coreason_commit_gate.events import EventEmitter
from coreason_commit_gate.utils.shell import ShellExecutor
from coreason_commit_gate.vcs.git import GitInterface


def _join(command: Optional[List[str]]) -> Optional[str]:
    return " ".join(command) if command else None


class PipelineBuilder:
    """Builder for the gate pipelines."""

    def __init__(
        self,
        settings: Settings,
        shell_executor: ShellExecutor,
        git: GitInterface,
        event_emitter: Optional[EventEmitter],
    ):
        self.settings = settings
        self.shell = shell_executor
        self.git = git
        self.event_emitter = event_emitter

    def build_pre_commit(self) -> List[CheckStep]:
        """Fixups first, then format, lint and type-check, cheapest to slowest."""
        timeout = self.settings.step_timeout
        steps: List[CheckStep] = []

        # 1. Staged file fixups
        steps.append(
            StagedFilesStep(
                command=self.settings.staged_files_command,
                git=self.git,
                restage_fixes=self.settings.restage_fixes,
                shell_executor=self.shell,
                timeout=timeout,
                pass_files=self.settings.staged_files_pass_files,
                event_emitter=self.event_emitter,
            )
        )

        # 2. Formatter check
        steps.append(
            CommandStep(
                name="format",
                command=self.settings.format_command,
                failure_message="Formatting check failed: some files are not formatted.",
                remedy=_join(self.settings.format_fix_command),
                shell_executor=self.shell,
                timeout=timeout,
                event_emitter=self.event_emitter,
            )
        )

        # 3. Linter
        steps.append(
            CommandStep(
                name="lint",
                command=self.settings.lint_command,
                failure_message="Lint check failed.",
                remedy=_join(self.settings.lint_fix_command),
                shell_executor=self.shell,
                timeout=timeout,
                event_emitter=self.event_emitter,
            )
        )

        # 4. Type check
        steps.append(
            CommandStep(
                name="type-check",
                command=self.settings.type_check_command,
                failure_message="Type check failed.",
                shell_executor=self.shell,
                timeout=timeout,
                event_emitter=self.event_emitter,
            )
        )

        return steps

    def build_commit_msg(self) -> CheckStep:
        if self.settings.commit_msg_command is None:
            return ConventionalCommitStep(
                header_max_length=self.settings.header_max_length,
                event_emitter=self.event_emitter,
            )

        return CommandStep(
            name="commit-msg",
            command=self.settings.commit_msg_command,
            failure_message="Commit message format invalid.",
            remedy=f"{' '.join(self.settings.commit_msg_command)} <file>",
            shell_executor=self.shell,
            timeout=self.settings.step_timeout,
            pass_message_path=True,
            event_emitter=self.event_emitter,
        )
