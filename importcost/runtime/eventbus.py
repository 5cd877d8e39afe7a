"""Per-session event bus.

A processing session publishes its lifecycle events (package manifests
found, extraction started, per-package costs, completion, errors) and
rendering or diagnostics consumers subscribe to them. Detaching every
subscriber is how a superseded session is cancelled.
"""

# Handlers are isolated: one failing subscriber must not break the session.


import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger("importcost.eventbus")


class EventType(Enum):
    """Events published by a processing session, in lifecycle order."""

    PACKAGE = auto()
    START = auto()
    CALCULATED = auto()
    DONE = auto()
    ERROR = auto()

    @property
    def terminal(self) -> bool:
        return self in (EventType.DONE, EventType.ERROR)


@dataclass
class Event:
    """Structured event payload.

    Attributes:
        event_type: Type of event.
        source: Path of the file the session processes.
        generation: Generation of the session that published the event.
        data: Event payload.
    """

    event_type: EventType
    source: str
    generation: int = 0
    data: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"Event({self.event_type.name}, source={self.source}, gen={self.generation})"


EventHandler = Callable[[Event], None]


class EventBus:
    """Event bus with subscription IDs and isolated handler execution.

    Dispatch happens on a snapshot of the handler list, so handlers may
    subscribe or unsubscribe while an event is being delivered.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[EventType, List[Tuple[str, EventHandler, str]]] = defaultdict(list)

    def subscribe(
        self, event_type: EventType, handler: EventHandler, name: Optional[str] = None
    ) -> str:
        """Subscribe to events of a specific type.

        Args:
            event_type: Type of event to subscribe to.
            handler: Callback invoked when the event is published.
            name: Optional handler name for logging.

        Returns:
            str: Subscription ID that can be used to unsubscribe.
        """
        subscription_id = str(uuid.uuid4())
        handler_name = name or getattr(handler, "__name__", "anonymous")
        self._subscribers[event_type].append((subscription_id, handler, handler_name))
        logger.debug(
            "Handler %s subscribed to %s (id=%s)",
            handler_name,
            event_type.name,
            subscription_id[:8],
        )
        return subscription_id

    def unsubscribe(self, subscription_id: str) -> bool:
        """Unsubscribe a handler by its subscription ID.

        Returns:
            bool: True if the subscription was found and removed.
        """
        for event_type, handlers in self._subscribers.items():
            for i, (sid, _, handler_name) in enumerate(handlers):
                if sid == subscription_id:
                    del handlers[i]
                    logger.debug(
                        "Handler %s unsubscribed from %s", handler_name, event_type.name
                    )
                    return True
        return False

    def publish(self, event: Event) -> None:
        """Publish ``event`` to all registered subscribers."""
        handlers_snapshot = list(self._subscribers.get(event.event_type, []))
        if not handlers_snapshot:
            logger.debug("No handlers for %s", event)
            return

        for _, handler, handler_name in handlers_snapshot:
            self._safe_call_handler(handler, handler_name, event)

    def _safe_call_handler(self, handler: EventHandler, handler_name: str, event: Event) -> None:
        try:
            handler(event)
        except Exception as e:
            logger.error(
                "Handler %s failed for event %s: %s",
                handler_name,
                event.event_type.name,
                e,
                exc_info=True,
            )

    def clear_subscribers(self, event_type: Optional[EventType] = None) -> None:
        """Clear subscribers for a specific event type or all types."""
        if event_type is None:
            self._subscribers.clear()
        else:
            self._subscribers[event_type].clear()

    def subscriber_count(self, event_type: Optional[EventType] = None) -> int:
        """Get the number of subscribers, for one event type or in total."""
        if event_type is None:
            return sum(len(handlers) for handlers in self._subscribers.values())
        return len(self._subscribers.get(event_type, []))


__all__ = ["Event", "EventBus", "EventHandler", "EventType"]
