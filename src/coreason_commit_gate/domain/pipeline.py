from enum import Enum
from pathlib import Path
from typing import List, Optional, Protocol

from pydantic import BaseModel, Field

from coreason_commit_gate.exceptions import StepFailure


class Stage(str, Enum):
    """Lifecycle points at which a commit is gated."""

    PRE_COMMIT = "pre-commit"
    COMMIT_MSG = "commit-msg"


class GateContext(BaseModel):
    """
    Input shared by every step of a single stage run.
    """

    stage: Stage = Field(..., description="The stage being run.")
    staged_files: List[str] = Field(default_factory=list, description="Paths staged for the commit.")
    message_path: Optional[Path] = Field(default=None, description="File holding the candidate commit message.")
    message: Optional[str] = Field(default=None, description="Raw text of the candidate commit message.")

    model_config = {"frozen": True}


class StepResult(BaseModel):
    """Outcome of one executed check."""

    step_name: str = Field(..., description="Name of the step that ran.")
    succeeded: bool = Field(..., description="Whether the check passed.")
    output: str = Field(default="", description="Captured diagnostic text.")
    exit_code: int = Field(default=0, description="Exit status reported by the collaborator.")


class GateFailure(BaseModel):
    """Identifies the step that blocked the commit."""

    step: str
    message: str
    exit_code: int = 1


class GateResult(BaseModel):
    """
    Outcome of a whole stage.
    A bypassed stage succeeds without results, which keeps it distinct from a genuine pass.
    """

    stage: Stage
    success: bool
    bypassed: bool = False
    results: List[StepResult] = Field(default_factory=list)
    failure: Optional[GateFailure] = None

    @property
    def exit_code(self) -> int:
        """Exit status for the hook: 0, or the failing step's code (at least 1)."""
        if self.success:
            return 0
        if self.failure and self.failure.exit_code > 0:
            return self.failure.exit_code
        return 1

    @property
    def output(self) -> str:
        if not self.results:
            return ""
        return self.results[-1].output

    def raise_for_failure(self) -> None:
        """Raises StepFailure if the stage failed."""
        if self.success:
            return
        failure = self.failure or GateFailure(step=self.stage.value, message="Gate failed")
        raise StepFailure(failure.step, failure.message, exit_code=self.exit_code, output=self.output)


class CheckStep(Protocol):
    """Protocol for a single check in a gate pipeline."""

    name: str
    failure_message: str
    remedy: str

    def execute(self, context: GateContext) -> StepResult:
        """
        Runs the check to completion.

        Args:
            context: GateContext for the current stage run.

        Returns:
            StepResult indicating success or failure.
        """
        ...  # pragma: no cover
