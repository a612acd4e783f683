"""In-process lifecycle notifications for record operations."""

import inspect
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

Listener = Callable[..., Awaitable[None] | None]

CLIENT_BEFORE_CREATE = "client.before_create"
CLIENT_CREATED = "client.created"
CLIENT_BEFORE_UPDATE = "client.before_update"
CLIENT_UPDATED = "client.updated"
CLIENT_BEFORE_DELETE = "client.before_delete"
CLIENT_DELETED = "client.deleted"


class LifecycleEvents:
    """Registry of listeners notified before and after record writes.

    Listeners may be plain functions or coroutine functions and run in
    subscription order. A listener that raises is logged and skipped; it
    never changes the outcome of the operation that emitted the event.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def subscribe(self, event: str, listener: Listener) -> None:
        self._listeners[event].append(listener)

    def unsubscribe(self, event: str, listener: Listener) -> None:
        if listener in self._listeners.get(event, []):
            self._listeners[event].remove(listener)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    async def emit(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners.get(event, [])):
            try:
                result = listener(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(
                    "Listener %s failed for '%s'",
                    getattr(listener, "__name__", repr(listener)),
                    event,
                )
