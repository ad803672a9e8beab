# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_commit_gate

import sys
from pathlib import Path
from typing import Callable, List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from coreason_commit_gate.config import get_settings
from coreason_commit_gate.container import GateContainer
from coreason_commit_gate.domain.commit_message import parse_commit_message
from coreason_commit_gate.domain.pipeline import GateResult
from coreason_commit_gate.exceptions import CommitMessageError, HookInstallError, StepFailure
from coreason_commit_gate.hooks.installer import HookInstaller
from coreason_commit_gate.orchestrator import CommitGate
from coreason_commit_gate.ui.console import render_failure, render_steps
from coreason_commit_gate.utils.logger import configure_logging, logger

app = typer.Typer(
    name="commit-gate",
    help="Coreason Commit Gate: fail-fast pre-commit and commit-msg checks",
    add_completion=False,
)

err_console = Console(stderr=True)
out_console = Console()

EXIT_INTERRUPTED = 130

StageRunner = Callable[[CommitGate, bool], GateResult]


def _configure_logging(container: GateContainer) -> None:
    settings = container.settings
    log_dir = None
    if settings.log_file and container.git.is_repository():
        log_dir = container.git.git_dir()
    configure_logging(level=settings.log_level, log_dir=log_dir)


def _run_stage(runner: StageRunner, no_verify: bool) -> int:
    """
    Runs one stage and maps its outcome to a hook exit code.
    """
    try:
        settings = get_settings()
        container = GateContainer(settings)
        _configure_logging(container)

        bypass = no_verify or settings.bypass
        container.console_emitter.start()
        try:
            result = runner(container.get_gate(), bypass)
        finally:
            container.console_emitter.stop()

        try:
            result.raise_for_failure()
        except StepFailure as e:
            render_failure(err_console, result)
            return e.exit_code

        if result.bypassed:
            err_console.print(f"[bold yellow]⚠ {result.stage.value} checks bypassed. This has been logged.[/bold yellow]")
        return 0

    except KeyboardInterrupt:
        logger.warning("Interrupted by operator.")
        return EXIT_INTERRUPTED
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1


@app.command(name="pre-commit")
def pre_commit(
    files: Optional[List[str]] = typer.Argument(None, help="Staged files. Queried from git when omitted."),
    no_verify: bool = typer.Option(False, "--no-verify", "-n", help="Skip every check. The override is logged."),
) -> None:
    """
    Runs staged-file fixups, format, lint and type checks. Fails fast.
    """

    def run(gate: CommitGate, bypass: bool) -> GateResult:
        return gate.run_pre_commit(list(files) if files else None, bypass=bypass)

    sys.exit(_run_stage(run, no_verify))


@app.command(name="commit-msg")
def commit_msg(
    message_file: Path = typer.Argument(..., help="File holding the candidate commit message."),
    no_verify: bool = typer.Option(False, "--no-verify", "-n", help="Skip the check. The override is logged."),
) -> None:
    """
    Validates the commit message format.
    """

    def run(gate: CommitGate, bypass: bool) -> GateResult:
        return gate.run_commit_msg_check(message_file, bypass=bypass)

    sys.exit(_run_stage(run, no_verify))


@app.command(name="lint-msg")
def lint_msg(
    message_file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    header_max_length: int = typer.Option(100, "--header-max-length", min=1),
) -> None:
    """
    Checks a commit message file against the conventional commit grammar.
    """
    message = message_file.read_text(encoding="utf-8")
    try:
        commit = parse_commit_message(message, header_max_length=header_max_length)
    except CommitMessageError as e:
        for violation in e.violations:
            err_console.print(f"[red]✖[/red] {escape(violation)}")
        raise typer.Exit(code=1)

    if commit is None:
        out_console.print("Git-generated message, not checked.")
    else:
        scope = f"({commit.scope})" if commit.scope else ""
        out_console.print(f"[green]✔[/green] {escape(commit.type.value + scope)}: {escape(commit.description)}")


@app.command(name="install")
def install(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite hooks not written by commit-gate."),
) -> None:
    """
    Installs the pre-commit and commit-msg hooks into the current repository.
    """
    try:
        paths = HookInstaller().install(force=force)
    except HookInstallError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    for path in paths:
        out_console.print(f"Installed {path}")


@app.command(name="uninstall")
def uninstall() -> None:
    """
    Removes hooks written by commit-gate.
    """
    try:
        paths = HookInstaller().uninstall()
    except HookInstallError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    if not paths:
        out_console.print("No commit-gate hooks found.")
    for path in paths:
        out_console.print(f"Removed {path}")


@app.command(name="steps")
def steps() -> None:
    """
    Lists the configured checks in execution order.
    """
    try:
        container = GateContainer()
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        raise typer.Exit(code=1)
    render_steps(out_console, container.pre_commit_steps, container.commit_msg_step)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
