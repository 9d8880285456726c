"""
In-process delivery of booking events to UI and service listeners.

Publishing is a plain function call loop: listeners run on the caller's
thread before publish() returns. A listener that raises is logged and
skipped; the cart or upload change that triggered the event stands.
"""

import logging
from typing import Callable, Dict, List

from core.events import BookingEvent

logger = logging.getLogger(__name__)


class EventBus:
    """
    Routes events to listeners registered under the event's class name.

    One bus is shared by the cart, booking flow, upload and contract objects
    of a session so a single toast listener sees every UserNotice.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}

    def subscribe(self, event_type: str, callback: Callable):
        """
        Register a listener.

        Args:
            event_type: Event class name, e.g. 'CartUpdated' or 'UserNotice'
            callback: Called with the event instance; listeners for one type
                run in registration order
        """
        self._subscribers.setdefault(event_type, []).append(callback)

    def unsubscribe(self, event_type: str, callback: Callable) -> bool:
        """Drop a listener. Returns False if it was never registered."""
        callbacks = self._subscribers.get(event_type, [])
        if callback not in callbacks:
            return False
        callbacks.remove(callback)
        return True

    def publish(self, event: BookingEvent):
        """Deliver an event to its listeners; listeners may (un)subscribe while it runs."""
        event_type = type(event).__name__

        for callback in list(self._subscribers.get(event_type, ())):
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Handler %s failed for %s (event_id=%s)",
                    getattr(callback, "__name__", repr(callback)),
                    event_type,
                    event.event_id,
                )
