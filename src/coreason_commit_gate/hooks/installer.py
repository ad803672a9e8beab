"""
Writes the git hook scripts that call back into commit-gate.
"""

import os
import shlex
import stat
import sys
from pathlib import Path
from typing import Dict, List, Optional

from coreason_commit_gate.exceptions import GitError, HookInstallError
from coreason_commit_gate.utils.logger import logger
from coreason_commit_gate.vcs.git import GitInterface

HOOK_MARKER = "# managed by commit-gate"

PRE_COMMIT_HOOK = """#!/bin/sh
{marker}
# Runs staged-file fixups, format, lint and type checks before each commit.
exec {runner} pre-commit
"""

COMMIT_MSG_HOOK = """#!/bin/sh
{marker}
# Validates the commit message format.
exec {runner} commit-msg "$1"
"""

HOOK_TEMPLATES: Dict[str, str] = {
    "pre-commit": PRE_COMMIT_HOOK,
    "commit-msg": COMMIT_MSG_HOOK,
}


def default_runner() -> str:
    """Invokes the CLI through the interpreter that installed the hooks, so no PATH lookup is needed."""
    return f"{shlex.quote(sys.executable)} -m coreason_commit_gate.cli"


class HookInstaller:
    """Installs and removes the pre-commit and commit-msg hooks."""

    def __init__(self, git: Optional[GitInterface] = None, runner: Optional[str] = None) -> None:
        self.git = git or GitInterface()
        self.runner = runner or default_runner()

    def install(self, force: bool = False) -> List[Path]:
        """
        Writes both hooks.

        Args:
            force: Overwrite hooks that were not written by commit-gate.

        Returns:
            Paths of the written hooks.

        Raises:
            HookInstallError: Outside a repository, or when a foreign hook is in the way.
        """
        hooks_dir = self._hooks_dir()
        hooks_dir.mkdir(parents=True, exist_ok=True)

        for name in HOOK_TEMPLATES:
            path = hooks_dir / name
            if path.exists() and not force and not self.is_managed(path):
                raise HookInstallError(f"{path} already exists and was not written by commit-gate. Use --force.")

        written: List[Path] = []
        for name, template in HOOK_TEMPLATES.items():
            path = hooks_dir / name
            path.write_text(template.format(marker=HOOK_MARKER, runner=self.runner), encoding="utf-8")
            mode = path.stat().st_mode
            os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
            logger.info(f"Installed git {name} hook: {path}")
            written.append(path)
        return written

    def uninstall(self) -> List[Path]:
        """
        Removes hooks written by commit-gate. Foreign hooks are left alone.

        Returns:
            Paths of the removed hooks.
        """
        hooks_dir = self._hooks_dir()
        removed: List[Path] = []
        for name in HOOK_TEMPLATES:
            path = hooks_dir / name
            if not path.exists():
                continue
            if not self.is_managed(path):
                logger.warning(f"Leaving {path} in place: not written by commit-gate")
                continue
            path.unlink()
            logger.info(f"Removed git {name} hook: {path}")
            removed.append(path)
        return removed

    @staticmethod
    def is_managed(path: Path) -> bool:
        try:
            return HOOK_MARKER in path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            return False

    def _hooks_dir(self) -> Path:
        try:
            return self.git.hooks_dir()
        except GitError as e:
            raise HookInstallError(f"Cannot locate the hooks directory: {e}") from e
