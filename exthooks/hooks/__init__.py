"""Hook system for extension lifecycle events."""

from .cancellation import CancelToken
from .dispatcher import Dispatcher
from .errors import (
    Cancelled,
    HandlerFailed,
    HookError,
    ScriptConfigError,
    ScriptExecutionFailed,
    TimeoutExceeded,
)
from .handlers import FunctionHandler, Handler, ScriptHandler
from .registry import EventRegistry
from .types import LifecycleEvent, Script, ScriptContext, event_name

__all__ = [
    "CancelToken",
    "Dispatcher",
    "EventRegistry",
    "Handler",
    "FunctionHandler",
    "ScriptHandler",
    "LifecycleEvent",
    "Script",
    "ScriptContext",
    "event_name",
    "HookError",
    "HandlerFailed",
    "TimeoutExceeded",
    "Cancelled",
    "ScriptExecutionFailed",
    "ScriptConfigError",
]
