"""In-process publish/subscribe registry with once and wildcard support.

Each :class:`EventBus` owns its own registry; nothing is shared between
instances. Dispatch is synchronous and runs on the caller's stack:

* wildcard handlers first, then handlers for the emitted name, each group in
  registration order;
* both groups are snapshotted when ``emit`` starts, so
  handlers added mid-dispatch wait for the next ``emit`` and handlers removed
  mid-dispatch still see the in-flight emission (``once`` handlers excepted:
  they never run twice);
* a raising handler aborts the rest of the pass unless the bus runs with
  ``ErrorPolicy.ISOLATE``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar

from core.config_models import BusSettings, ErrorPolicy
from core.events import WILDCARD, EventHandler, WildcardEvent

LOGGER = logging.getLogger(__name__)

EventsT = TypeVar("EventsT")


class Subscription:
    """One registration on a bus; calling it unsubscribes.

    Each ``on``/``once`` call creates a distinct subscription, so registering
    the same callable twice yields two entries that are removed separately.
    """

    __slots__ = ("event_name", "handler", "once", "_bus", "_active")

    def __init__(self, bus: "EventBus[Any]", event_name: str, handler: EventHandler, once: bool = False) -> None:
        self.event_name = event_name
        self.handler = handler
        self.once = once
        self._bus = bus
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def __call__(self) -> None:
        self._bus._remove(self)

    def __repr__(self) -> str:
        kind = "once" if self.once else "on"
        state = "active" if self._active else "inactive"
        return f"<Subscription {kind} {self.event_name!r} {self.handler!r} ({state})>"


class EventBus(Generic[EventsT]):
    """Registry mapping event names to ordered subscriptions.

    ``EventsT`` is documentation only: ``EventBus[MyEvents]`` names the
    ``TypedDict`` of events a bus carries, but no method signature is bound
    to it, so payloads are not checked against it. At runtime any string is
    accepted as an event name.
    """

    def __init__(self, settings: Optional[BusSettings] = None) -> None:
        self._settings = settings or BusSettings()
        self._registry: Dict[str, List[Subscription]] = {WILDCARD: []}

    @property
    def settings(self) -> BusSettings:
        return self._settings

    def on(self, event_name: str, handler: EventHandler) -> Subscription:
        """Register ``handler`` for ``event_name`` (or ``"*"``)."""

        return self._add(event_name, handler, once=False)

    def once(self, event_name: str, handler: EventHandler) -> Subscription:
        """Register ``handler`` to run on the next matching emission only."""

        return self._add(event_name, handler, once=True)

    def emit(self, event_name: str, payload: Any = None) -> None:
        """Deliver ``payload`` to wildcard handlers, then to ``event_name`` handlers."""

        wildcard = tuple(self._registry[WILDCARD])
        # Emitting "*" itself reaches the wildcard handlers once, not twice.
        direct = () if event_name == WILDCARD else tuple(self._registry.get(event_name, ()))
        if self._settings.trace_dispatch:
            LOGGER.debug(
                "emit %r: %d wildcard, %d direct handlers",
                event_name,
                len(wildcard),
                len(direct),
            )
        if wildcard:
            envelope = WildcardEvent(event_name=event_name, payload=payload)
            for subscription in wildcard:
                self._deliver(subscription, envelope)

        for subscription in direct:
            self._deliver(subscription, payload)

    def clear(self, event_name: Optional[str] = None) -> None:
        """Drop handlers for one name, or every handler when ``event_name`` is None."""

        if event_name is None:
            for subscriptions in self._registry.values():
                self._deactivate_all(subscriptions)
            self._registry = {WILDCARD: []}
            LOGGER.debug("cleared all handlers")
            return

        subscriptions = self._registry.get(event_name)
        if subscriptions is None:
            return
        self._deactivate_all(subscriptions)
        self._registry[event_name] = []
        LOGGER.debug("cleared handlers for %r", event_name)

    def listeners(self, event_name: str) -> Tuple[EventHandler, ...]:
        """Handlers currently registered for ``event_name``, in dispatch order."""

        return tuple(subscription.handler for subscription in self._registry.get(event_name, ()))

    def listener_count(self, event_name: Optional[str] = None) -> int:
        if event_name is None:
            return sum(len(subscriptions) for subscriptions in self._registry.values())
        return len(self._registry.get(event_name, ()))

    def event_names(self) -> Tuple[str, ...]:
        """Names that hold at least one handler; the wildcard is not listed."""

        return tuple(name for name, subscriptions in self._registry.items() if subscriptions and name != WILDCARD)

    def _add(self, event_name: str, handler: EventHandler, once: bool) -> Subscription:
        subscription = Subscription(self, event_name, handler, once=once)
        self._registry.setdefault(event_name, []).append(subscription)
        LOGGER.debug("subscribed %r", subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        if not subscription._active:
            return
        subscription._active = False
        subscriptions = self._registry.get(subscription.event_name, [])
        for index, entry in enumerate(subscriptions):
            if entry is subscription:
                del subscriptions[index]
                break
        LOGGER.debug("unsubscribed %r", subscription)

    def _deliver(self, subscription: Subscription, argument: Any) -> None:
        if subscription.once:
            if not subscription._active:
                return
            self._remove(subscription)

        if self._settings.error_policy is ErrorPolicy.PROPAGATE:
            subscription.handler(argument)
            return
        try:
            subscription.handler(argument)
        except Exception:
            LOGGER.exception("handler %r for %r failed", subscription.handler, subscription.event_name)

    @staticmethod
    def _deactivate_all(subscriptions: List[Subscription]) -> None:
        for subscription in subscriptions:
            subscription._active = False


def create_event_bus(settings: Optional[BusSettings] = None) -> EventBus[Any]:
    """Return a new, empty bus; no state is shared with other buses."""

    return EventBus(settings)
