"""Event shapes shared by the bus and its callers.

Event names are free-form strings. ``"*"`` is reserved: handlers registered
under it observe every emission and receive a :class:`WildcardEvent` instead
of the bare payload.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

WILDCARD = "*"

EventHandler = Callable[[Any], None]
Unsubscribe = Callable[[], None]


@dataclass(frozen=True, slots=True)
class WildcardEvent:
    """What a wildcard handler sees: the emitted name plus its payload."""

    event_name: str
    payload: Any = None


WildcardHandler = Callable[[WildcardEvent], None]
