"""Hook event names and the data carriers passed to handlers."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class LifecycleEvent(str, Enum):
    """Events the extension manager triggers at lifecycle transitions."""

    BEFORE_INSTALL = "extension-before-install"
    AFTER_INSTALL = "extension-after-install"
    BEFORE_UNINSTALL = "extension-before-uninstall"
    AFTER_UNINSTALL = "extension-after-uninstall"
    BEFORE_RUN = "extension-before-run"

    def __str__(self) -> str:
        return self.value


# Any string is a valid event; LifecycleEvent members are the well-known ones
Event = Union[str, LifecycleEvent]


def event_name(event: Event) -> str:
    """Normalize an event to the plain string used as registry key."""
    if isinstance(event, Enum):
        return str(event.value)
    return event


@dataclass
class ScriptContext:
    """Payload shared by every handler of a single dispatch.

    The same instance (including ``data``) is handed to each handler in turn,
    so a handler sees whatever earlier handlers of the same dispatch left in it.
    """

    event: str
    command: str = ""
    args: list[str] = field(default_factory=list)
    extension: str = ""
    working_dir: Optional[str] = None
    environment: dict[str, str] = field(default_factory=dict)
    data: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.event = event_name(self.event)


@dataclass(frozen=True)
class Script:
    """Declarative definition of an external-process hook.

    Parameters
    ----------
    name : str
        Identifier used in logs and errors.
    description : str
        Human-readable summary.
    script : str
        Command text, run through the shell.
    enabled : bool
        Disabled scripts are skipped without error.
    timeout : float
        Seconds before the process is killed; 0 means no limit.
    environment : dict[str, str]
        Variables layered over the inherited environment (these win).
    working_dir : str, optional
        Directory to run in; falls back to the context's working directory.
    """

    name: str
    script: str
    description: str = ""
    enabled: bool = True
    timeout: float = 0.0
    environment: dict[str, str] = field(default_factory=dict)
    working_dir: Optional[str] = None
