"""Event registry mapping event names to ordered handler lists."""

import threading
from typing import Callable, Optional

from loguru import logger

from .handlers import FunctionHandler, Handler, HandlerFunc, ScriptHandler
from .types import Event, Script, event_name


class EventRegistry:
    """Ordered, append-only handler lists keyed by event name.

    Thread-safe: registration and snapshots share one lock, held only while
    the map is read or appended to, never while a handler runs. Create one per
    extension manager and pass it in; there is no process-wide instance.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}
        self._lock = threading.Lock()

    def register_handler(self, event: Event, handler: Handler) -> None:
        """Append a handler to the event's list, creating the list if absent.

        Duplicates are allowed; a handler registered twice runs twice.
        """
        key = event_name(event)
        with self._lock:
            self._handlers.setdefault(key, []).append(handler)
        logger.debug(f"Registered hook '{handler.name}' for {key}")

    def register_function(
        self, event: Event, func: HandlerFunc, name: Optional[str] = None
    ) -> FunctionHandler:
        """Wrap a callable in a FunctionHandler and register it."""
        handler = FunctionHandler(func, name)
        self.register_handler(event, handler)
        return handler

    def register_script(self, event: Event, script: Script) -> ScriptHandler:
        """Wrap a Script in a ScriptHandler and register it."""
        handler = ScriptHandler(script)
        self.register_handler(event, handler)
        return handler

    def on(
        self, event: Event, name: Optional[str] = None
    ) -> Callable[[HandlerFunc], HandlerFunc]:
        """Decorator registering a function for an event.

        Example:
            @registry.on(LifecycleEvent.BEFORE_INSTALL)
            def check(token, ctx):
                ...
        """

        def decorator(func: HandlerFunc) -> HandlerFunc:
            self.register_function(event, func, name)
            return func

        return decorator

    def snapshot(self, event: Event) -> list[Handler]:
        """Copy of the event's current handler list (empty if none)."""
        key = event_name(event)
        with self._lock:
            return list(self._handlers.get(key, ()))

    def events(self) -> list[str]:
        """Names of all events with at least one registered handler."""
        with self._lock:
            return [key for key, handlers in self._handlers.items() if handlers]

    def count(self, event: Event) -> int:
        key = event_name(event)
        with self._lock:
            return len(self._handlers.get(key, ()))

    def has_handlers(self, event: Event) -> bool:
        return self.count(event) > 0

    def list_handlers(self, event: Optional[Event] = None) -> dict[str, list[str]]:
        """List handler names, for one event or all of them.

        Returns
        -------
        dict[str, list[str]]
            Event name to handler names in dispatch order.
        """
        with self._lock:
            if event is not None:
                key = event_name(event)
                return {key: [h.name for h in self._handlers.get(key, ())]}
            return {key: [h.name for h in handlers] for key, handlers in self._handlers.items()}
