from pathlib import Path
from typing import List, Optional

from coreason_commit_gate.exceptions import GitError
from coreason_commit_gate.utils.logger import logger
from coreason_commit_gate.utils.shell import ShellError, ShellExecutor


class GitInterface:
    """
    Interface for interacting with the git CLI.

    File lists are relative to the top of the work tree, whatever the current
    directory, and are read NUL-separated so names are never quoted.
    """

    def __init__(self, shell_executor: Optional[ShellExecutor] = None) -> None:
        self.shell = shell_executor or ShellExecutor()

    def is_repository(self) -> bool:
        """
        Checks whether the current directory is inside a git work tree.
        """
        result = self.shell.run(["git", "rev-parse", "--is-inside-work-tree"], check=False)
        return result.exit_code == 0 and result.stdout.strip() == "true"

    def staged_files(self) -> List[str]:
        """
        Lists files staged for the next commit. Deleted files are left out.

        Raises:
            GitError: If git fails.
        """
        return self._name_only(["git", "diff", "--cached", "--name-only", "-z", "--diff-filter=ACMR"])

    def unstaged_files(self) -> List[str]:
        """
        Lists tracked files whose working tree copy differs from the index.

        Raises:
            GitError: If git fails.
        """
        return self._name_only(["git", "diff", "--name-only", "-z"])

    def add(self, files: List[str]) -> None:
        """
        Stages the given files, given relative to the top of the work tree.

        Raises:
            GitError: If git add fails.
        """
        if not files:
            return
        logger.info(f"Re-staging {len(files)} file(s): {', '.join(files)}")
        pathspecs = [f":(top,literal){name}" for name in files]
        try:
            self.shell.run(["git", "add", "--", *pathspecs], check=True)
        except ShellError as e:
            logger.error(f"Git add failed: {e}")
            raise GitError(f"Git add failed: {e}", e.result) from e

    def git_dir(self) -> Path:
        """
        Returns the repository's git directory.

        Raises:
            GitError: If not inside a repository.
        """
        return Path(self._rev_parse(["--git-dir"]))

    def hooks_dir(self) -> Path:
        """
        Returns the directory git reads hooks from, honouring core.hooksPath.

        Raises:
            GitError: If not inside a repository.
        """
        return Path(self._rev_parse(["--git-path", "hooks"]))

    def _rev_parse(self, args: List[str]) -> str:
        try:
            result = self.shell.run(["git", "rev-parse", *args], check=True)
        except ShellError as e:
            logger.error(f"git rev-parse {' '.join(args)} failed: {e}")
            raise GitError(f"Not a git repository: {e}", e.result) from e
        return result.stdout.strip()

    def _name_only(self, command: List[str]) -> List[str]:
        try:
            result = self.shell.run(command, check=True)
        except ShellError as e:
            logger.error(f"{' '.join(command)} failed: {e}")
            raise GitError(f"Failed to list files: {e}", e.result) from e
        return [name for name in result.stdout.split("\0") if name]
