import functools
import re
from typing import Union

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Suffix multipliers accepted in human-written timeouts ("250ms", "5s", "2m")
DURATION_UNITS: dict[str, float] = {
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$")

VALID_LOG_LEVELS: tuple[str, ...] = (
    "TRACE",
    "DEBUG",
    "INFO",
    "SUCCESS",
    "WARNING",
    "ERROR",
    "CRITICAL",
)


def parse_duration(value: Union[str, int, float, None]) -> float:
    """Parse a timeout value into seconds.

    Parameters
    ----------
    value : str, int, float or None
        Number of seconds, or a string such as "100ms", "5s", "2m".
        None means no limit.

    Returns
    -------
    float
        Duration in seconds (0.0 means no limit).

    Raises
    ------
    ValueError
        If the value is negative or cannot be parsed.
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        if value < 0:
            raise ValueError(f"Duration must not be negative, got {value}")
        return float(value)

    match = _DURATION_PATTERN.match(str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return float(amount) * DURATION_UNITS[unit or "s"]


class RunnerConfig(BaseModel):
    """Subprocess handling for script hooks."""

    terminate_grace: float = 2.0
    kill_wait: float = 2.0
    poll_interval: float = 0.05
    capture_output: bool = False
    env_prefix: str = "EXTHOOKS_SCRIPT"

    @field_validator("terminate_grace", "kill_wait", "poll_interval")
    @classmethod
    def validate_positive_float(cls, v: float, info) -> float:
        """Ensure timing values are positive."""
        if v <= 0:
            raise ValueError(f"{info.field_name} must be positive, got {v}")
        return v

    @field_validator("env_prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        """Environment prefixes must be usable as variable names."""
        if not re.match(r"^[A-Za-z_][A-Za-z0-9_]*$", v):
            raise ValueError(f"env_prefix must be a valid variable name, got {v!r}")
        return v


class Config(BaseSettings):
    """
    Hook engine configuration loaded from multiple sources.

    Priority (highest to lowest):
    1. Environment variables (EXTHOOKS_ prefix)
    2. .env file
    3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="EXTHOOKS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Applied by the script loader when a definition has no timeout
    DEFAULT_SCRIPT_TIMEOUT: float = 30.0

    # Subprocess termination
    TERMINATE_GRACE_SECONDS: float = 2.0
    KILL_WAIT_SECONDS: float = 2.0
    POLL_INTERVAL_SECONDS: float = 0.05

    # Run scripts with captured output instead of the caller's terminal
    CAPTURE_OUTPUT: bool = False

    # Prefix for context variables exported to scripts
    SCRIPT_ENV_PREFIX: str = "EXTHOOKS_SCRIPT"

    LOG_LEVEL: str = "INFO"

    @field_validator("DEFAULT_SCRIPT_TIMEOUT", mode="before")
    @classmethod
    def validate_timeout(cls, v) -> float:
        """Accept plain seconds or suffixed durations."""
        return parse_duration(v)

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(VALID_LOG_LEVELS)}, got {v}")
        return level

    @functools.cached_property
    def runner(self) -> RunnerConfig:
        """Build RunnerConfig from environment variables."""
        return RunnerConfig(
            terminate_grace=self.TERMINATE_GRACE_SECONDS,
            kill_wait=self.KILL_WAIT_SECONDS,
            poll_interval=self.POLL_INTERVAL_SECONDS,
            capture_output=self.CAPTURE_OUTPUT,
            env_prefix=self.SCRIPT_ENV_PREFIX,
        )


config = Config()
