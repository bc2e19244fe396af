"""Predefined function hooks."""

import time
from typing import Any, Callable

from loguru import logger

from .cancellation import CancelToken
from .handlers import FunctionHandler
from .types import Event, ScriptContext, event_name


def logging_handler(event: Event) -> FunctionHandler:
    """Log each time the event fires."""
    key = event_name(event)

    def log_event(token: CancelToken, ctx: ScriptContext) -> None:
        logger.info(f"Hook {key} fired for extension '{ctx.extension}'")

    return FunctionHandler(log_event, f"log:{key}")


def validation_handler(
    validator: Callable[[ScriptContext], None], name: str = "validate"
) -> FunctionHandler:
    """Fail the chain when ``validator`` raises."""

    def validate(token: CancelToken, ctx: ScriptContext) -> None:
        validator(ctx)

    return FunctionHandler(validate, name)


def require_extension_name() -> FunctionHandler:
    """Reject contexts without an extension name."""

    def check(ctx: ScriptContext) -> None:
        if not ctx.extension:
            raise ValueError("extension name cannot be empty")

    return validation_handler(check, "require-extension-name")


def metrics_handler(
    collector: Callable[[str, dict[str, Any]], None], operation: str = "extension_operation"
) -> FunctionHandler:
    """Report the dispatch to ``collector(operation, metrics)``.

    Metrics include the extension, command, event and a Unix timestamp, plus
    every entry of ``ctx.data``.
    """

    def collect(token: CancelToken, ctx: ScriptContext) -> None:
        metrics: dict[str, Any] = {
            "extension_name": ctx.extension,
            "command": ctx.command,
            "event": ctx.event,
            "timestamp": int(time.time()),
        }
        metrics.update(ctx.data)
        collector(operation, metrics)

    return FunctionHandler(collect, f"metrics:{operation}")
