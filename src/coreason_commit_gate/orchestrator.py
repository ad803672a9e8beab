# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_commit_gate

from pathlib import Path
from typing import List, Optional, Union

from coreason_commit_gate.domain.pipeline import CheckStep, GateContext, GateFailure, GateResult, Stage, StepResult
from coreason_commit_gate.events import EventEmitter, EventType, GateEvent, LoguruEmitter
from coreason_commit_gate.vcs.git import GitInterface


class CommitGate:
    """
    Gates a commit attempt at two points of its lifecycle.
    Each stage is a linear, fail-fast sequence of checks run one at a time.
    Nothing is kept between invocations.
    """

    def __init__(
        self,
        pre_commit_steps: List[CheckStep],
        commit_msg_step: CheckStep,
        git_interface: Optional[GitInterface] = None,
        event_emitter: Optional[EventEmitter] = None,
    ) -> None:
        self.pre_commit_steps = pre_commit_steps
        self.commit_msg_step = commit_msg_step
        self.git = git_interface
        self.event_emitter = event_emitter or LoguruEmitter()

    def run_pre_commit(self, staged_files: Optional[List[str]] = None, bypass: bool = False) -> GateResult:
        """
        Runs staged-file fixups, format, lint and type-check, stopping at the first failure.

        Args:
            staged_files: Files staged for the commit. Queried from git when omitted.
            bypass: Skip every check.

        Returns:
            GateResult for the pre-commit stage.

        Raises:
            GitError: If staged files have to be queried and git fails.
        """
        if bypass:
            return self._bypass(Stage.PRE_COMMIT)

        if staged_files is None:
            staged_files = self.git.staged_files() if self.git else []

        context = GateContext(stage=Stage.PRE_COMMIT, staged_files=staged_files)
        return self._run(context, self.pre_commit_steps)

    def run_commit_msg_check(self, message_path: Union[str, Path], bypass: bool = False) -> GateResult:
        """
        Validates the candidate commit message stored at message_path.

        Args:
            message_path: File git wrote the message to.
            bypass: Skip the check.

        Returns:
            GateResult for the commit-msg stage.
        """
        if bypass:
            return self._bypass(Stage.COMMIT_MSG)

        path = Path(message_path)
        try:
            message = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            error_msg = f"Could not read commit message file {path}: {e}"
            self.event_emitter.emit(GateEvent(type=EventType.ERROR, message=error_msg, payload={"path": str(path)}))
            failure = GateFailure(step=self.commit_msg_step.name, message=error_msg)
            return GateResult(stage=Stage.COMMIT_MSG, success=False, failure=failure)

        context = GateContext(stage=Stage.COMMIT_MSG, message_path=path, message=message)
        return self._run(context, [self.commit_msg_step])

    def _run(self, context: GateContext, steps: List[CheckStep]) -> GateResult:
        stage = context.stage
        self.event_emitter.emit(
            GateEvent(
                type=EventType.STAGE_START,
                message=f"Starting {stage.value} stage",
                payload={"stage": stage.value, "steps": [step.name for step in steps]},
            )
        )

        results: List[StepResult] = []
        for step in steps:
            result = step.execute(context)
            results.append(result)

            if not result.succeeded:
                failure = GateFailure(
                    step=step.name,
                    message=f"{step.failure_message} Run `{step.remedy}` locally to fix.",
                    exit_code=result.exit_code,
                )
                self.event_emitter.emit(
                    GateEvent(
                        type=EventType.STAGE_RESULT,
                        message=f"{stage.value} blocked at step '{step.name}'",
                        payload={"stage": stage.value, "status": "fail", "step": step.name},
                    )
                )
                return GateResult(stage=stage, success=False, results=results, failure=failure)

        self.event_emitter.emit(
            GateEvent(
                type=EventType.STAGE_RESULT,
                message=f"{stage.value} passed",
                payload={"stage": stage.value, "status": "pass"},
            )
        )
        return GateResult(stage=stage, success=True, results=results)

    def _bypass(self, stage: Stage) -> GateResult:
        self.event_emitter.emit(
            GateEvent(
                type=EventType.BYPASS,
                message=f"{stage.value} checks bypassed by operator override",
                payload={"stage": stage.value, "status": "bypass"},
            )
        )
        return GateResult(stage=stage, success=True, bypassed=True)
