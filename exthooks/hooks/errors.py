"""Errors raised by hook dispatch and script execution."""

from typing import Optional


def _position(event: Optional[str], handler_index: Optional[int]) -> str:
    if event is None:
        return ""
    if handler_index is None:
        return f" for event '{event}'"
    return f" for event '{event}' at handler #{handler_index}"


class HookError(Exception):
    """Base class for all hook engine errors."""

    pass


class HandlerFailed(HookError):
    """Raised when a handler in a dispatch chain fails.

    ``cause`` is the handler's original exception (also set as ``__cause__``),
    so callers can tell which hook failed apart from why it failed.
    """

    def __init__(
        self,
        event: str,
        handler_index: int,
        cause: BaseException,
        handler_name: Optional[str] = None,
    ):
        self.event = event
        self.handler_index = handler_index
        self.handler_name = handler_name
        self.cause = cause
        label = f" ({handler_name})" if handler_name else ""
        super().__init__(
            f"Hook #{handler_index}{label} for event '{event}' failed: {cause}"
        )


class TimeoutExceeded(HookError):
    """Raised when a deadline elapses before a chain or a script completes."""

    def __init__(
        self,
        event: Optional[str] = None,
        handler_index: Optional[int] = None,
        timeout: Optional[float] = None,
        script_name: Optional[str] = None,
    ):
        self.event = event
        self.handler_index = handler_index
        self.timeout = timeout
        self.script_name = script_name
        subject = f"Script '{script_name}'" if script_name else "Hook execution"
        limit = f" after {timeout:g}s" if timeout else ""
        super().__init__(f"{subject} timed out{limit}{_position(event, handler_index)}")

    def at(self, event: str, handler_index: int) -> "TimeoutExceeded":
        """Copy of this error positioned at a handler in a dispatch chain."""
        return TimeoutExceeded(event, handler_index, self.timeout, self.script_name)


class Cancelled(HookError):
    """Raised when the cancellation token was signalled externally."""

    def __init__(
        self,
        event: Optional[str] = None,
        handler_index: Optional[int] = None,
        script_name: Optional[str] = None,
    ):
        self.event = event
        self.handler_index = handler_index
        self.script_name = script_name
        subject = f"Script '{script_name}'" if script_name else "Hook execution"
        super().__init__(f"{subject} was cancelled{_position(event, handler_index)}")

    def at(self, event: str, handler_index: int) -> "Cancelled":
        """Copy of this error positioned at a handler in a dispatch chain."""
        return Cancelled(event, handler_index, self.script_name)


class ScriptExecutionFailed(HookError):
    """Raised when a script hook exits with a nonzero status."""

    def __init__(self, script_name: str, exit_code: int, output: str = ""):
        self.script_name = script_name
        self.exit_code = exit_code
        self.output = output
        message = f"Script '{script_name}' failed with exit code {exit_code}"
        tail = output.strip()
        if tail:
            message += f": {tail[-500:]}"
        super().__init__(message)


class ScriptConfigError(HookError, ValueError):
    """Raised when a script definition is invalid."""

    pass
