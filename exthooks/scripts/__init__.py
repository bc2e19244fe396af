"""Script hooks: subprocess execution and definition loading."""

from .loader import bind_scripts, load_scripts, parse_scripts, script_from_mapping
from .runner import ScriptResult, ScriptRunner

__all__ = [
    "ScriptRunner",
    "ScriptResult",
    "load_scripts",
    "parse_scripts",
    "script_from_mapping",
    "bind_scripts",
]
