# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_commit_gate

from typing import Dict, List, Optional

from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from coreason_commit_gate.domain.pipeline import CheckStep, GateResult
from coreason_commit_gate.events import EventType, GateEvent

_STATUS_ICONS = {
    "pass": ("✅", "green"),
    "fail": ("❌", "red"),
    "skip": ("⏭️", "dim"),
    "bypass": ("⚠️", "yellow"),
    "running": ("⏳", "yellow"),
}


class RichConsoleEmitter:
    """
    Renders gate events to a rich terminal table on stderr.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console(stderr=True)
        self.checks: Dict[str, Dict[str, str]] = {}  # check_name -> {status, message}
        self.live: Optional[Live] = None
        self.title = "Commit Gate"

    def start(self) -> None:
        self.live = Live(self.generate_table(), console=self.console, refresh_per_second=4, transient=False)
        self.live.start()

    def stop(self) -> None:
        if self.live:
            self.live.stop()
            self.live = None

    def generate_table(self) -> Table:
        table = Table(title=self.title, expand=True)
        table.add_column("Check", style="cyan")
        table.add_column("Status", justify="center")
        table.add_column("Details", style="dim")

        for name, data in self.checks.items():
            status = data.get("status", "running")
            icon, style = _STATUS_ICONS.get(status, ("⏳", "yellow"))
            table.add_row(name, icon, escape(data.get("message", "")), style=style)

        return table

    def emit(self, event: GateEvent) -> None:
        if not self.live:
            return

        if event.type == EventType.STAGE_START:
            self.title = f"Commit Gate: {event.payload.get('stage', '')}"
            self.checks = {}
        elif event.type == EventType.STEP_RUNNING:
            check_key = event.payload.get("check") or event.message
            self.checks[check_key] = {"status": "running", "message": event.message}
        elif event.type == EventType.STEP_RESULT:
            check_key = event.payload.get("check") or event.message
            self.checks[check_key] = {"status": event.payload.get("status", "pass"), "message": event.message}
        elif event.type == EventType.BYPASS:
            self.checks["bypass"] = {"status": "bypass", "message": event.message}
        elif event.type == EventType.ERROR:
            self.checks["error"] = {"status": "fail", "message": event.message}
        else:
            return

        self.live.update(self.generate_table())


def render_failure(console: Console, result: GateResult) -> None:
    """Prints the failing step, its remedy and the captured tool output."""
    if result.success or result.failure is None:
        return
    failure = result.failure
    console.print(f"[bold red]✖ Commit blocked at step '{failure.step}'[/bold red]")
    console.print(Text(failure.message))
    if result.output:
        console.print(Panel(Text(result.output), title=f"{failure.step} output", border_style="red", expand=False))


def render_steps(console: Console, pre_commit: List[CheckStep], commit_msg: CheckStep) -> None:
    table = Table(title="Configured checks")
    table.add_column("#", justify="right")
    table.add_column("Stage")
    table.add_column("Check", style="cyan")
    table.add_column("Remedy", style="dim")

    for index, step in enumerate(pre_commit, start=1):
        table.add_row(str(index), "pre-commit", step.name, escape(step.remedy))
    table.add_row("1", "commit-msg", commit_msg.name, escape(commit_msg.remedy))

    console.print(table)
