# Extension lifecycle hook dispatch engine

from .hooks import (
    CancelToken,
    Cancelled,
    Dispatcher,
    EventRegistry,
    FunctionHandler,
    HandlerFailed,
    HookError,
    LifecycleEvent,
    Script,
    ScriptConfigError,
    ScriptContext,
    ScriptExecutionFailed,
    ScriptHandler,
    TimeoutExceeded,
)
from .lifecycle import ExtensionLifecycle
from .scripts import ScriptResult, ScriptRunner, load_scripts

__version__ = "0.1.0"
