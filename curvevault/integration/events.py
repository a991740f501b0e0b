"""Event sinks for engine records."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import List, Type, TypeVar

from ..core.types import Event, EventSink

logger = logging.getLogger(__name__)

R = TypeVar("R")


class EventLog(EventSink):
    """Keeps every record in emission order."""

    def __init__(self) -> None:
        self.records: List[object] = []

    def emit(self, record: object) -> None:
        self.records.append(record)

    def of_type(self, record_type: Type[R]) -> List[R]:
        return [r for r in self.records if isinstance(r, record_type)]

    def of_event(self, event: Event) -> List[object]:
        return [r for r in self.records if getattr(r, "event", None) is event]

    def clear(self) -> None:
        self.records.clear()

    def __len__(self) -> int:
        return len(self.records)


class LoggingEventSink(EventSink):
    """Writes each record to this module's logger."""

    def __init__(self, level: int = logging.INFO) -> None:
        self._level = level

    def emit(self, record: object) -> None:
        event = getattr(record, "event", None)
        name = event.value if isinstance(event, Event) else type(record).__name__
        logger.log(self._level, "%s %s", name, asdict(record))
