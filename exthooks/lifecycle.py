"""Extension lifecycle facade applying the abort-or-log policy per event."""

from typing import Any, Iterable, Optional

from loguru import logger

from .hooks.cancellation import CancelToken
from .hooks.dispatcher import Dispatcher
from .hooks.errors import HookError, TimeoutExceeded
from .hooks.registry import EventRegistry
from .hooks.types import Event, LifecycleEvent, ScriptContext, event_name

# Failures of these events abort the surrounding operation; others are logged
ABORTING_EVENTS: frozenset[str] = frozenset(
    {
        LifecycleEvent.BEFORE_INSTALL.value,
        LifecycleEvent.BEFORE_UNINSTALL.value,
        LifecycleEvent.BEFORE_RUN.value,
    }
)


class ExtensionLifecycle:
    """Triggers lifecycle hooks on behalf of an extension manager.

    ``before-*`` hook failures are raised so the caller aborts the install,
    uninstall or run. ``after-*`` failures are logged and returned; the
    completed operation is not rolled back.
    """

    def __init__(
        self,
        registry: Optional[EventRegistry] = None,
        dispatcher: Optional[Dispatcher] = None,
    ) -> None:
        if dispatcher is not None:
            self.registry = dispatcher.registry
            self.dispatcher = dispatcher
        else:
            self.registry = registry or EventRegistry()
            self.dispatcher = Dispatcher(self.registry)

    def trigger(
        self,
        event: Event,
        extension: str,
        command: str = "",
        args: Iterable[str] = (),
        working_dir: Optional[str] = None,
        data: Optional[dict[str, Any]] = None,
        environment: Optional[dict[str, str]] = None,
        token: Optional[CancelToken] = None,
        abort_on_error: Optional[bool] = None,
    ) -> Optional[HookError]:
        """Build a ScriptContext and dispatch ``event``.

        Args:
            event: Event to trigger
            extension: Name of the extension the operation concerns
            command: Command being run (for before-run)
            args: Command arguments
            working_dir: Working directory for script hooks
            data: Extra payload for handlers
            environment: Extra variables for script hooks
            token: Cancellation token for the dispatch
            abort_on_error: Override the per-event policy

        Returns:
            None on success, or the error when the policy says to log it

        Raises:
            HookError: On failure of an aborting event
        """
        key = event_name(event)
        ctx = ScriptContext(
            event=key,
            command=command,
            args=list(args),
            extension=extension,
            working_dir=working_dir,
            environment=dict(environment or {}),
            data=dict(data or {}),
        )
        if abort_on_error is None:
            abort_on_error = key in ABORTING_EVENTS

        try:
            self.dispatcher.execute(token, key, ctx)
        except HookError as e:
            if abort_on_error:
                logger.error(f"{key} hook failed for '{extension}', aborting: {e}")
                raise
            if isinstance(e, TimeoutExceeded):
                logger.warning(f"{key} hook timed out for '{extension}' (consider raising the timeout): {e}")
            else:
                logger.warning(f"{key} hook failed for '{extension}', continuing: {e}")
            return e
        return None

    def before_install(self, extension: str, **kwargs) -> Optional[HookError]:
        return self.trigger(LifecycleEvent.BEFORE_INSTALL, extension, **kwargs)

    def after_install(self, extension: str, **kwargs) -> Optional[HookError]:
        return self.trigger(LifecycleEvent.AFTER_INSTALL, extension, **kwargs)

    def before_uninstall(self, extension: str, **kwargs) -> Optional[HookError]:
        return self.trigger(LifecycleEvent.BEFORE_UNINSTALL, extension, **kwargs)

    def after_uninstall(self, extension: str, **kwargs) -> Optional[HookError]:
        return self.trigger(LifecycleEvent.AFTER_UNINSTALL, extension, **kwargs)

    def before_run(
        self, extension: str, command: str, args: Iterable[str] = (), **kwargs
    ) -> Optional[HookError]:
        return self.trigger(
            LifecycleEvent.BEFORE_RUN, extension, command=command, args=args, **kwargs
        )
