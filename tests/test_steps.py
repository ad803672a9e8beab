from pathlib import Path
from unittest.mock import MagicMock

import pytest

from coreason_commit_gate.checks.steps import CommandStep, ConventionalCommitStep, StagedFilesStep
from coreason_commit_gate.domain.pipeline import GateContext, Stage
from coreason_commit_gate.events import EventCollector, EventType
from coreason_commit_gate.exceptions import GitError
from coreason_commit_gate.utils.shell import CommandResult


@pytest.fixture
def mock_shell() -> MagicMock:
    shell = MagicMock()
    shell.run.return_value = CommandResult(0, "ok", "")
    return shell


@pytest.fixture
def mock_git() -> MagicMock:
    git = MagicMock()
    git.unstaged_files.return_value = []
    return git


@pytest.fixture
def collector() -> EventCollector:
    return EventCollector()


def _pre_commit(staged_files: list) -> GateContext:
    return GateContext(stage=Stage.PRE_COMMIT, staged_files=staged_files)


def test_command_step_success(mock_shell: MagicMock, collector: EventCollector) -> None:
    step = CommandStep(
        name="lint",
        command=["eslint", "."],
        failure_message="Lint check failed.",
        shell_executor=mock_shell,
        event_emitter=collector,
    )

    result = step.execute(_pre_commit(["a.ts"]))

    assert result.succeeded is True
    assert result.step_name == "lint"
    assert result.output == "ok"
    mock_shell.run.assert_called_once_with(["eslint", "."], timeout=None)
    types = [event.type for event in collector.get_events()]
    assert types == [EventType.STEP_RUNNING, EventType.STEP_RESULT]
    assert collector.get_events()[-1].payload["status"] == "pass"


def test_command_step_failure_keeps_exit_code(mock_shell: MagicMock, collector: EventCollector) -> None:
    mock_shell.run.return_value = CommandResult(2, "", "src/a.ts: unformatted")
    step = CommandStep(
        name="format",
        command=["prettier", "--check", "."],
        failure_message="Formatting check failed.",
        shell_executor=mock_shell,
        event_emitter=collector,
    )

    result = step.execute(_pre_commit([]))

    assert result.succeeded is False
    assert result.exit_code == 2
    assert result.output == "src/a.ts: unformatted"
    assert collector.get_events()[-1].payload == {"check": "format", "status": "fail", "exit_code": 2}


def test_command_step_default_remedy() -> None:
    step = CommandStep(name="type-check", command=["tsc", "--noEmit"], failure_message="Type check failed.")
    assert step.remedy == "tsc --noEmit"


def test_command_step_passes_files_and_timeout(mock_shell: MagicMock) -> None:
    step = CommandStep(
        name="lint",
        command=["ruff", "check"],
        failure_message="Lint check failed.",
        shell_executor=mock_shell,
        timeout=10,
        pass_files=True,
    )

    step.execute(_pre_commit(["a.py", "b.py"]))

    mock_shell.run.assert_called_once_with(["ruff", "check", "a.py", "b.py"], timeout=10)


def test_command_step_passes_message_path(mock_shell: MagicMock) -> None:
    step = CommandStep(
        name="commit-msg",
        command=["commitlint", "--edit"],
        failure_message="Commit message format invalid.",
        shell_executor=mock_shell,
        pass_message_path=True,
    )
    context = GateContext(stage=Stage.COMMIT_MSG, message_path=Path(".git/COMMIT_EDITMSG"), message="feat: x")

    step.execute(context)

    mock_shell.run.assert_called_once_with(["commitlint", "--edit", str(Path(".git/COMMIT_EDITMSG"))], timeout=None)


def test_staged_files_step_skips_without_staged_files(
    mock_shell: MagicMock, mock_git: MagicMock, collector: EventCollector
) -> None:
    step = StagedFilesStep(command=["lint-staged"], git=mock_git, shell_executor=mock_shell, event_emitter=collector)

    result = step.execute(_pre_commit([]))

    assert result.succeeded is True
    assert result.output == "no staged files"
    mock_shell.run.assert_not_called()
    mock_git.unstaged_files.assert_not_called()
    assert collector.get_events()[-1].payload["status"] == "skip"


def test_staged_files_step_restages_only_fixed_staged_files(mock_shell: MagicMock, mock_git: MagicMock) -> None:
    mock_git.unstaged_files.side_effect = [
        ["notes.md"],
        ["notes.md", "src/a.ts", "src/untouched.ts"],
    ]
    step = StagedFilesStep(command=["lint-staged"], git=mock_git, shell_executor=mock_shell)

    result = step.execute(_pre_commit(["src/a.ts", "src/b.ts", "notes.md"]))

    assert result.succeeded is True
    mock_git.add.assert_called_once_with(["src/a.ts"])


def test_staged_files_step_clean_tree_has_no_side_effects(mock_shell: MagicMock, mock_git: MagicMock) -> None:
    step = StagedFilesStep(command=["lint-staged"], git=mock_git, shell_executor=mock_shell)

    assert step.execute(_pre_commit(["src/a.ts"])).succeeded is True
    assert step.execute(_pre_commit(["src/a.ts"])).succeeded is True

    mock_git.add.assert_not_called()


def test_staged_files_step_failure_does_not_restage(mock_shell: MagicMock, mock_git: MagicMock) -> None:
    mock_shell.run.return_value = CommandResult(1, "", "eslint errors")
    mock_git.unstaged_files.return_value = ["src/a.ts"]
    step = StagedFilesStep(command=["lint-staged"], git=mock_git, shell_executor=mock_shell)

    result = step.execute(_pre_commit(["src/a.ts"]))

    assert result.succeeded is False
    assert result.exit_code == 1
    mock_git.add.assert_not_called()
    assert mock_git.unstaged_files.call_count == 1


def test_staged_files_step_passes_staged_files_to_fixer(mock_shell: MagicMock, mock_git: MagicMock) -> None:
    step = StagedFilesStep(command=["ruff", "check", "--fix"], git=mock_git, shell_executor=mock_shell, pass_files=True)

    step.execute(_pre_commit(["src/a.py", "src/b.py"]))

    mock_shell.run.assert_called_once_with(["ruff", "check", "--fix", "src/a.py", "src/b.py"], timeout=None)


def test_staged_files_step_restage_disabled(mock_shell: MagicMock, mock_git: MagicMock) -> None:
    step = StagedFilesStep(command=["lint-staged"], git=mock_git, restage_fixes=False, shell_executor=mock_shell)

    result = step.execute(_pre_commit(["src/a.ts"]))

    assert result.succeeded is True
    mock_git.unstaged_files.assert_not_called()
    mock_git.add.assert_not_called()


def test_staged_files_step_git_error_is_a_failure(
    mock_shell: MagicMock, mock_git: MagicMock, collector: EventCollector
) -> None:
    mock_git.unstaged_files.side_effect = [[], ["src/a.ts"]]
    mock_git.add.side_effect = GitError("Git add failed: index.lock exists")
    step = StagedFilesStep(command=["lint-staged"], git=mock_git, shell_executor=mock_shell, event_emitter=collector)

    result = step.execute(_pre_commit(["src/a.ts"]))

    assert result.succeeded is False
    assert "index.lock" in result.output
    assert collector.get_events()[-1].payload["status"] == "fail"


def test_conventional_commit_step_pass(collector: EventCollector) -> None:
    step = ConventionalCommitStep(event_emitter=collector)
    context = GateContext(stage=Stage.COMMIT_MSG, message="feat: add new feature")

    result = step.execute(context)

    assert result.succeeded is True
    assert result.step_name == "commit-msg"
    assert collector.get_events()[-1].payload["status"] == "pass"


def test_conventional_commit_step_fail(collector: EventCollector) -> None:
    step = ConventionalCommitStep(event_emitter=collector)
    context = GateContext(stage=Stage.COMMIT_MSG, message="invalid message")

    result = step.execute(context)

    assert result.succeeded is False
    assert result.exit_code == 1
    assert "type(scope): description" in result.output
    assert collector.get_events()[-1].payload["status"] == "fail"


def test_conventional_commit_step_header_limit() -> None:
    step = ConventionalCommitStep(header_max_length=10)
    context = GateContext(stage=Stage.COMMIT_MSG, message="feat: add new feature")

    assert step.execute(context).succeeded is False
