"""Synchronous, fail-fast dispatch of an event's handler chain."""

import time
from typing import Optional

from loguru import logger

from ..scripts.runner import ScriptRunner
from .cancellation import CancelToken
from .errors import Cancelled, HandlerFailed, TimeoutExceeded
from .registry import EventRegistry
from .types import Event, ScriptContext, event_name


class Dispatcher:
    """Run every handler registered for an event, in registration order.

    Execution happens entirely on the calling thread. The first failing
    handler stops the chain; the raised error names the event and the 0-based
    position of the handler so callers can report which hook failed.
    """

    def __init__(
        self,
        registry: EventRegistry,
        runner: Optional[ScriptRunner] = None,
    ) -> None:
        self.registry = registry
        self.runner = runner or ScriptRunner()

    def execute(
        self,
        token: Optional[CancelToken],
        event: Event,
        ctx: ScriptContext,
    ) -> None:
        """Dispatch ``event`` with ``ctx`` to a snapshot of its handlers.

        Args:
            token: Cancellation token for the whole chain (None: never cancelled)
            event: Event to dispatch
            ctx: Payload shared by all handlers of this dispatch

        Raises:
            Cancelled: The token was cancelled before or during a handler
            TimeoutExceeded: The token's deadline or a script timeout elapsed
            HandlerFailed: A handler raised; the original error is ``cause``
        """
        key = event_name(event)
        handlers = self.registry.snapshot(key)
        if not handlers:
            logger.debug(f"No hooks registered for {key}")
            return

        token = token or CancelToken()
        logger.debug(f"Dispatching {key} to {len(handlers)} hook(s)")

        for index, handler in enumerate(handlers):
            if token.cancelled():
                logger.warning(f"Dispatch of {key} cancelled before hook #{index} ({handler.name})")
                raise Cancelled(key, index)
            if token.expired():
                logger.warning(f"Dispatch of {key} timed out before hook #{index} ({handler.name})")
                raise TimeoutExceeded(key, index)

            start = time.monotonic()
            try:
                handler.invoke(token, ctx, self.runner)
            except (Cancelled, TimeoutExceeded) as e:
                logger.warning(f"Hook #{index} ({handler.name}) for {key} stopped: {e}")
                raise e.at(key, index) from e
            except Exception as e:
                logger.error(f"Hook #{index} ({handler.name}) for {key} failed: {e}")
                raise HandlerFailed(key, index, e, handler.name) from e

            duration_ms = int((time.monotonic() - start) * 1000)
            logger.debug(f"Hook #{index} ({handler.name}) for {key} completed in {duration_ms}ms")
