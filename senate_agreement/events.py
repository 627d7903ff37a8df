"""
Event Dispatch Module for the Senate Agreement Dashboard.

A small publish/subscribe hub used by the views to request a refresh when
the member selection changes. Events carry no payload; handlers re-read the
shared ``Congress`` state they were built around.
"""

import logging
from enum import Enum
from typing import Callable, Dict, Iterable, List

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Kinds of events the dashboard dispatches."""

    # Reloads all views when the member selection has changed
    SELECTION_CHANGED = "selectionChanged"


Handler = Callable[[], None]


class EventDispatcher:
    """
    Fan-out notifier keyed by ``EventType``.

    Handlers are invoked synchronously, in registration order, once per
    publish. There is no unsubscribe.
    """

    def __init__(self, event_types: Iterable[EventType] = EventType):
        """
        Initialize the dispatcher.

        Args:
            event_types: Event kinds this dispatcher accepts.
        """
        self._handlers: Dict[EventType, List[Handler]] = {
            event_type: [] for event_type in event_types
        }

    def _handlers_for(self, event_type: EventType) -> List[Handler]:
        if event_type not in self._handlers:
            raise ValueError(f"Unknown event type: {event_type!r}")
        return self._handlers[event_type]

    def subscribe(self, event_type: EventType, handler: Handler) -> None:
        """
        Register a handler for every future publish of ``event_type``.

        Args:
            event_type: Event kind to listen for.
            handler: Callable taking no arguments.
        """
        if not callable(handler):
            raise TypeError(f"Handler must be callable, got {type(handler).__name__}")

        handlers = self._handlers_for(event_type)
        handlers.append(handler)
        logger.debug(f"Subscribed handler #{len(handlers)} to {event_type.value}")

    def publish(self, event_type: EventType) -> int:
        """
        Invoke every handler registered for ``event_type``.

        Exceptions raised by a handler propagate to the caller.

        Returns:
            Number of handlers invoked.
        """
        # Snapshot so handlers subscribing during dispatch wait for the next publish
        handlers = list(self._handlers_for(event_type))
        logger.debug(f"Publishing {event_type.value} to {len(handlers)} handler(s)")

        for handler in handlers:
            handler()

        return len(handlers)

    def subscriber_count(self, event_type: EventType) -> int:
        """Number of handlers registered for ``event_type``."""
        return len(self._handlers_for(event_type))

    def on_selection_changed(self, handler: Handler) -> None:
        """Shortcut for subscribing to ``SELECTION_CHANGED``."""
        self.subscribe(EventType.SELECTION_CHANGED, handler)

    def selection_changed(self) -> int:
        """Shortcut for publishing ``SELECTION_CHANGED``."""
        return self.publish(EventType.SELECTION_CHANGED)
