"""Handler variants bound to events.

Every variant exposes ``name`` and ``invoke(token, ctx, runner)`` so the
dispatcher treats them uniformly. A new kind of handler only needs to
implement the same two members.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional

from .cancellation import CancelToken
from .types import Script, ScriptContext

if TYPE_CHECKING:
    from ..scripts.runner import ScriptRunner

# Signature of an in-process hook: (token, ctx) -> ignored result; raise to fail
HandlerFunc = Callable[[CancelToken, ScriptContext], Any]


class Handler(ABC):
    """A unit of work registered against an event."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Label used in logs and errors."""

    @abstractmethod
    def invoke(
        self, token: CancelToken, ctx: ScriptContext, runner: "ScriptRunner"
    ) -> None:
        """Run the handler; raise to fail the dispatch."""


@dataclass(frozen=True, eq=False)
class FunctionHandler(Handler):
    """In-process callback, run inline on the dispatching thread.

    Cancellation is cooperative: the callback may poll ``token.done()`` or call
    ``token.raise_if_done()``; otherwise it runs to completion.
    """

    func: HandlerFunc
    label: Optional[str] = None

    @property
    def name(self) -> str:
        if self.label:
            return self.label
        return getattr(self.func, "__qualname__", None) or repr(self.func)

    def invoke(
        self, token: CancelToken, ctx: ScriptContext, runner: "ScriptRunner"
    ) -> None:
        self.func(token, ctx)


@dataclass(frozen=True, eq=False)
class ScriptHandler(Handler):
    """External-process hook backed by a Script definition."""

    script: Script

    @property
    def name(self) -> str:
        return self.script.name

    def invoke(
        self, token: CancelToken, ctx: ScriptContext, runner: "ScriptRunner"
    ) -> None:
        runner.run(token, self.script, ctx)
