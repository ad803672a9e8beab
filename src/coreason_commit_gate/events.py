import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Protocol

from coreason_commit_gate.utils.logger import logger


class EventType(Enum):
    STAGE_START = "stage_start"
    STEP_RUNNING = "step_running"
    STEP_RESULT = "step_result"
    BYPASS = "bypass"
    STAGE_RESULT = "stage_result"
    ERROR = "error"


@dataclass
class GateEvent:
    type: EventType
    message: str
    timestamp: float = field(default_factory=time.time)
    payload: Dict[str, Any] = field(default_factory=dict)


class EventEmitter(Protocol):
    def emit(self, event: GateEvent) -> None:
        """Emits a gate event."""
        ...  # pragma: no cover


class LoguruEmitter:
    """Adapter that logs events to Loguru."""

    def emit(self, event: GateEvent) -> None:
        if event.type == EventType.BYPASS:
            # Always visible, so an override never goes unnoticed
            logger.warning(f"[{event.type.value}] {event.message} | {event.payload}")
        elif event.type == EventType.ERROR:
            logger.error(f"[{event.type.value}] {event.message} | {event.payload}")
        elif event.type in (EventType.STEP_RESULT, EventType.STAGE_RESULT):
            status = event.payload.get("status", "unknown")
            if status == "fail":
                logger.error(f"[{event.type.value}] {event.message} | {event.payload}")
            else:
                logger.info(f"[{event.type.value}] {event.message} | {event.payload}")
        else:
            logger.info(f"[{event.type.value}] {event.message} | {event.payload}")


class EventCollector:
    """Collects events in memory."""

    def __init__(self) -> None:
        self.events: List[GateEvent] = []

    def emit(self, event: GateEvent) -> None:
        self.events.append(event)

    def get_events(self) -> List[GateEvent]:
        return self.events


class CompositeEmitter:
    """Broadcasts events to multiple emitters."""

    def __init__(self, emitters: List[EventEmitter]) -> None:
        self.emitters = emitters

    def emit(self, event: GateEvent) -> None:
        for emitter in self.emitters:
            emitter.emit(event)
