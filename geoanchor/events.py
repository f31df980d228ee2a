"""
Listener channels for sensor events and state-change notifications.

Everything runs on one thread; a channel simply calls its listeners in
subscription order. Cancelling a subscription is idempotent.
"""

import logging
from typing import Any, Callable, List

logger = logging.getLogger(__name__)

Listener = Callable[..., None]


class Subscription:
    """Handle returned by EventChannel.subscribe()."""

    __slots__ = ("_channel", "_listener", "_active")

    def __init__(self, channel: "EventChannel", listener: Listener) -> None:
        self._channel = channel
        self._listener = listener
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        """Remove the listener from its channel. Safe to call more than once."""
        if not self._active:
            return
        self._active = False
        self._channel._remove(self._listener)


class EventChannel:
    """
    A named source of events.

    emit() iterates over a snapshot of the listeners, so a listener may cancel
    its own (or another) subscription while being called.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Subscription:
        self._listeners.append(listener)
        return Subscription(self, listener)

    def emit(self, *args: Any) -> None:
        for listener in list(self._listeners):
            if listener in self._listeners:
                listener(*args)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _remove(self, listener: Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            logger.debug("Listener already removed from %s", self.name)
