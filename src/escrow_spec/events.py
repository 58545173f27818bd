"""Event log helpers."""

from __future__ import annotations

from typing import Any, Iterable

from .types import Event, WorldState


def emit(state: WorldState, emitter: bytes, name: str, **args: Any) -> Event:
    event = Event(emitter=emitter, name=name, args=args)
    state.logs.append(event)
    return event


def events_named(events: Iterable[Event], name: str) -> list[Event]:
    return [e for e in events if e.name == name]
