"""
Punch sequence rules.

A person's punches walk ``IN -> BREAK_START -> BREAK_END -> OUT`` and
start again with ``IN``. Only the latest recorded event is consulted.
"""

from __future__ import annotations

from typing import Protocol

from schoolhub.core.enums import EventType
from schoolhub.core.exceptions import InvalidInputError, InvalidSequenceError

EVENT_ORDER: list[EventType] = list(EventType)


class PunchLike(Protocol):
    event_type: str


def _rank(event_type: EventType) -> int:
    return EVENT_ORDER.index(event_type)


def validate_sequence(last_event: PunchLike | None, next_type: EventType | str) -> None:
    """Raise :class:`InvalidSequenceError` if *next_type* may not follow *last_event*."""
    try:
        next_type = EventType(next_type)
    except ValueError as exc:
        raise InvalidInputError("Invalid event type") from exc

    if last_event is None:
        if next_type is not EventType.IN:
            raise InvalidSequenceError("First punch must be IN")
        return

    last_type = EventType(last_event.event_type)

    if last_type is EventType.OUT and next_type is not EventType.IN:
        raise InvalidSequenceError("Next punch must start with IN after OUT")

    if next_type is last_type:
        raise InvalidSequenceError(f"Duplicate {next_type.value} punch not allowed")

    if _rank(next_type) < _rank(last_type) and not (
        last_type is EventType.OUT and next_type is EventType.IN
    ):
        raise InvalidSequenceError(f"Invalid punch order after {last_type.value}")

    if last_type is EventType.IN and next_type is EventType.BREAK_END:
        raise InvalidSequenceError("BREAK_END requires BREAK_START")

    if last_type is EventType.BREAK_START and next_type is EventType.OUT:
        raise InvalidSequenceError("OUT requires BREAK_END")
