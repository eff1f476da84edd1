"""Typed in-process event bus."""

from core.config_models import BusSettings, ErrorPolicy
from core.event_bus import EventBus, Subscription, create_event_bus
from core.events import WILDCARD, EventHandler, Unsubscribe, WildcardEvent, WildcardHandler

__all__ = [
    "BusSettings",
    "ErrorPolicy",
    "EventBus",
    "EventHandler",
    "Subscription",
    "Unsubscribe",
    "WILDCARD",
    "WildcardEvent",
    "WildcardHandler",
    "create_event_bus",
]
