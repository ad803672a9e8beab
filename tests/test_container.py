from coreason_commit_gate.config import Settings
from coreason_commit_gate.container import GateContainer
from coreason_commit_gate.events import LoguruEmitter
from coreason_commit_gate.ui.console import RichConsoleEmitter


def test_container_wires_log_and_console_emitters() -> None:
    container = GateContainer(Settings())

    emitters = container.composite_emitter.emitters
    assert len(emitters) == 2
    assert isinstance(emitters[0], LoguruEmitter)
    assert isinstance(emitters[1], RichConsoleEmitter)


def test_container_shares_one_emitter_and_git() -> None:
    container = GateContainer(Settings())

    assert all(step.event_emitter is container.composite_emitter for step in container.pre_commit_steps)
    assert container.commit_msg_step.event_emitter is container.composite_emitter
    assert container.pre_commit_steps[0].git is container.git
    assert container.get_gate() is container.gate
