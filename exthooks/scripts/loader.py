"""Build Script definitions from mappings or YAML files.

A hooks file maps event names to lists of script definitions:

    extension-before-install:
      - name: check-disk
        script: ./scripts/check-disk.sh
        timeout: 5s
        environment:
          MIN_FREE_MB: "200"
"""

import os
import shlex
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml
from loguru import logger

from ..config import config, parse_duration
from ..hooks.errors import ScriptConfigError
from ..hooks.registry import EventRegistry
from ..hooks.types import Script


def _warn_if_not_executable(name: str, command: str, working_dir: Optional[str]) -> None:
    """Warn when the command starts with a script file that lacks the exec bit."""
    try:
        program = shlex.split(command)[0]
    except (ValueError, IndexError):
        return
    if os.sep not in program:
        return  # resolved through PATH by the shell

    path = Path(program).expanduser()
    if not path.is_absolute() and working_dir:
        path = Path(working_dir).expanduser() / path
    if path.is_file() and not os.access(path, os.X_OK):
        logger.warning(f"Script '{name}' points at {path}, which is not executable")


def script_from_mapping(
    data: Mapping[str, Any], default_timeout: Optional[float] = None
) -> Script:
    """Validate a mapping and build a Script from it.

    Parameters
    ----------
    data : Mapping[str, Any]
        Definition with ``name`` and ``script`` keys, and optionally
        ``description``, ``enabled``, ``timeout``, ``environment`` and
        ``working_dir``.
    default_timeout : float, optional
        Timeout applied when the definition has none (defaults to
        config.DEFAULT_SCRIPT_TIMEOUT).

    Returns
    -------
    Script
        The validated definition.

    Raises
    ------
    ScriptConfigError
        If a required field is missing or a value has the wrong type.
    """
    if not isinstance(data, Mapping):
        raise ScriptConfigError(f"Script definition must be a mapping, got {type(data).__name__}")

    name = str(data.get("name") or "").strip()
    if not name:
        raise ScriptConfigError("Script name cannot be empty")

    command = str(data.get("script") or "").strip()
    if not command:
        raise ScriptConfigError(f"Script '{name}' has no command")

    if "timeout" in data:
        raw_timeout = data["timeout"]
    elif default_timeout is not None:
        raw_timeout = default_timeout
    else:
        raw_timeout = config.DEFAULT_SCRIPT_TIMEOUT
    try:
        timeout = parse_duration(raw_timeout)
    except ValueError as e:
        raise ScriptConfigError(f"Script '{name}' has invalid timeout: {e}") from e

    environment = data.get("environment") or {}
    if not isinstance(environment, Mapping):
        raise ScriptConfigError(f"Script '{name}' environment must be a mapping")

    enabled = data.get("enabled", True)
    if not isinstance(enabled, bool):
        raise ScriptConfigError(f"Script '{name}' enabled must be true or false, got {enabled!r}")

    working_dir = data.get("working_dir")
    _warn_if_not_executable(name, command, working_dir)

    return Script(
        name=name,
        script=command,
        description=str(data.get("description") or ""),
        enabled=enabled,
        timeout=timeout,
        environment={str(k): str(v) for k, v in environment.items()},
        working_dir=str(working_dir) if working_dir else None,
    )


def parse_scripts(
    data: Mapping[str, Any], default_timeout: Optional[float] = None
) -> dict[str, list[Script]]:
    """Parse an event -> definitions mapping into Script lists."""
    if not isinstance(data, Mapping):
        raise ScriptConfigError("Hooks configuration must map event names to script lists")

    scripts: dict[str, list[Script]] = {}
    for event, definitions in data.items():
        if definitions is None:
            continue
        if isinstance(definitions, Mapping):
            definitions = [definitions]
        if not isinstance(definitions, list):
            raise ScriptConfigError(f"Scripts for event '{event}' must be a list")
        scripts[str(event)] = [script_from_mapping(d, default_timeout) for d in definitions]
    return scripts


def load_scripts(
    path: Union[str, Path], default_timeout: Optional[float] = None
) -> dict[str, list[Script]]:
    """Load script definitions from a YAML hooks file."""
    file_path = Path(path).expanduser()
    try:
        content = file_path.read_text()
    except OSError as e:
        raise ScriptConfigError(f"Cannot read hooks file {file_path}: {e}") from e

    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        raise ScriptConfigError(f"Invalid YAML in {file_path}: {e}") from e

    scripts = parse_scripts(data, default_timeout)
    total = sum(len(s) for s in scripts.values())
    logger.info(f"Loaded {total} script hook(s) for {len(scripts)} event(s) from {file_path}")
    return scripts


def bind_scripts(registry: EventRegistry, scripts: Mapping[str, list[Script]]) -> int:
    """Register loaded scripts in file order. Returns the number registered."""
    count = 0
    for event, definitions in scripts.items():
        for script in definitions:
            registry.register_script(event, script)
            count += 1
    return count
