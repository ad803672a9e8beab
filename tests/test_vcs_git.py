import shutil
import subprocess
import sys
from pathlib import Path
from typing import List
from unittest.mock import MagicMock

import pytest

from coreason_commit_gate.checks.steps import StagedFilesStep
from coreason_commit_gate.domain.pipeline import GateContext, Stage
from coreason_commit_gate.exceptions import GitError
from coreason_commit_gate.utils.shell import CommandResult, ShellError
from coreason_commit_gate.vcs.git import GitInterface


@pytest.fixture
def mock_shell() -> MagicMock:
    return MagicMock()


@pytest.fixture
def git(mock_shell: MagicMock) -> GitInterface:
    return GitInterface(shell_executor=mock_shell)


def test_staged_files(git: GitInterface, mock_shell: MagicMock) -> None:
    """Test staged_files parses git's name-only output."""
    mock_shell.run.return_value = CommandResult(0, "src/a.ts\0src/b.ts\0", "")

    assert git.staged_files() == ["src/a.ts", "src/b.ts"]
    mock_shell.run.assert_called_with(
        ["git", "diff", "--cached", "--name-only", "-z", "--diff-filter=ACMR"], check=True
    )


def test_staged_files_empty(git: GitInterface, mock_shell: MagicMock) -> None:
    mock_shell.run.return_value = CommandResult(0, "", "")
    assert git.staged_files() == []


def test_staged_files_error(git: GitInterface, mock_shell: MagicMock) -> None:
    """Test staged_files raises GitError when git fails."""
    mock_shell.run.side_effect = ShellError("Command failed", CommandResult(128, "", "fatal"))

    with pytest.raises(GitError) as excinfo:
        git.staged_files()

    assert excinfo.value.result is not None
    assert excinfo.value.result.exit_code == 128


def test_unstaged_files(git: GitInterface, mock_shell: MagicMock) -> None:
    mock_shell.run.return_value = CommandResult(0, "README.md\0", "")

    assert git.unstaged_files() == ["README.md"]
    mock_shell.run.assert_called_with(["git", "diff", "--name-only", "-z"], check=True)


def test_add(git: GitInterface, mock_shell: MagicMock) -> None:
    mock_shell.run.return_value = CommandResult(0, "", "")

    git.add(["a.ts", "b.ts"])

    mock_shell.run.assert_called_once_with(["git", "add", "--", ":(top,literal)a.ts", ":(top,literal)b.ts"], check=True)


def test_add_nothing(git: GitInterface, mock_shell: MagicMock) -> None:
    git.add([])
    mock_shell.run.assert_not_called()


def test_add_error(git: GitInterface, mock_shell: MagicMock) -> None:
    mock_shell.run.side_effect = ShellError("Command failed", CommandResult(1, "", "index.lock exists"))

    with pytest.raises(GitError) as excinfo:
        git.add(["a.ts"])

    assert "Git add failed" in str(excinfo.value)


def test_hooks_dir(git: GitInterface, mock_shell: MagicMock) -> None:
    mock_shell.run.return_value = CommandResult(0, ".git/hooks\n", "")

    assert git.hooks_dir() == Path(".git/hooks")
    mock_shell.run.assert_called_with(["git", "rev-parse", "--git-path", "hooks"], check=True)


def test_git_dir(git: GitInterface, mock_shell: MagicMock) -> None:
    mock_shell.run.return_value = CommandResult(0, ".git\n", "")
    assert git.git_dir() == Path(".git")


def test_git_dir_outside_repository(git: GitInterface, mock_shell: MagicMock) -> None:
    mock_shell.run.side_effect = ShellError("Command failed", CommandResult(128, "", "not a git repository"))

    with pytest.raises(GitError) as excinfo:
        git.git_dir()

    assert "Not a git repository" in str(excinfo.value)


def test_is_repository(git: GitInterface, mock_shell: MagicMock) -> None:
    mock_shell.run.return_value = CommandResult(0, "true\n", "")
    assert git.is_repository() is True

    mock_shell.run.return_value = CommandResult(128, "", "fatal: not a git repository")
    assert git.is_repository() is False


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")


def _git(repo: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=repo, check=True, capture_output=True)


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """A real repository with quotePath on, as git ships it."""
    _git(tmp_path, "init", "-q")
    _git(tmp_path, "config", "core.quotePath", "true")
    return tmp_path


def _stage(repo: Path, name: str) -> None:
    path = repo / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("export const a = 1\n", encoding="utf-8")
    _git(repo, "add", "--", name)


def _append_line(name: str) -> List[str]:
    return [sys.executable, "-c", f"open({name!r}, 'a', encoding='utf-8').write('// fixed\\n')"]


@requires_git
def test_non_ascii_names_round_trip_through_add(repo: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _stage(repo, "café.ts")
    (repo / "café.ts").write_text("export const a = 2\n", encoding="utf-8")
    monkeypatch.chdir(repo)
    git = GitInterface()

    assert git.staged_files() == ["café.ts"]
    assert git.unstaged_files() == ["café.ts"]

    git.add(git.unstaged_files())

    assert git.unstaged_files() == []


@requires_git
def test_staged_files_step_restages_non_ascii_fixups(repo: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _stage(repo, "café.ts")
    monkeypatch.chdir(repo)
    git = GitInterface()
    step = StagedFilesStep(command=_append_line("café.ts"), git=git)

    result = step.execute(GateContext(stage=Stage.PRE_COMMIT, staged_files=git.staged_files()))

    assert result.succeeded, result.output
    assert git.unstaged_files() == []


@requires_git
def test_add_from_subdirectory_uses_top_level_paths(repo: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _stage(repo, "src/a.ts")
    monkeypatch.chdir(repo / "src")
    git = GitInterface()
    step = StagedFilesStep(command=_append_line("a.ts"), git=git)

    result = step.execute(GateContext(stage=Stage.PRE_COMMIT, staged_files=git.staged_files()))

    assert result.succeeded, result.output
    assert git.staged_files() == ["src/a.ts"]
    assert git.unstaged_files() == []
