from typing import Optional

from coreason_commit_gate.checks.builder import PipelineBuilder
from coreason_commit_gate.config import Settings, get_settings
from coreason_commit_gate.events import CompositeEmitter, LoguruEmitter
from coreason_commit_gate.hooks.installer import HookInstaller
from coreason_commit_gate.orchestrator import CommitGate
from coreason_commit_gate.ui.console import RichConsoleEmitter
from coreason_commit_gate.utils.shell import ShellExecutor
from coreason_commit_gate.vcs.git import GitInterface


class GateContainer:
    """
    Dependency Injection Container for the Commit Gate.
    Wires up the application components.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()

        # Core Components
        self.shell_executor = ShellExecutor()
        self.git = GitInterface(shell_executor=self.shell_executor)

        # Events
        self.log_emitter = LoguruEmitter()
        self.console_emitter = RichConsoleEmitter()
        self.composite_emitter = CompositeEmitter([self.log_emitter, self.console_emitter])

        # Pipelines
        self.builder = PipelineBuilder(
            settings=self.settings,
            shell_executor=self.shell_executor,
            git=self.git,
            event_emitter=self.composite_emitter,
        )
        self.pre_commit_steps = self.builder.build_pre_commit()
        self.commit_msg_step = self.builder.build_commit_msg()

        self.gate = CommitGate(
            pre_commit_steps=self.pre_commit_steps,
            commit_msg_step=self.commit_msg_step,
            git_interface=self.git,
            event_emitter=self.composite_emitter,
        )

        self.installer = HookInstaller(git=self.git)

    def get_gate(self) -> CommitGate:
        return self.gate
