"""Run Script hooks as subprocesses with timeout and cancellation."""

import os
import shlex
import signal
import subprocess
import time
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from ..config import RunnerConfig, config
from ..hooks.cancellation import CancelToken
from ..hooks.errors import Cancelled, ScriptExecutionFailed, TimeoutExceeded
from ..hooks.types import Script, ScriptContext

# Children get their own process group so a timeout can kill the whole tree
_USE_PROCESS_GROUP = os.name == "posix"


@dataclass
class ScriptResult:
    """Result of a script hook execution."""

    script_name: str
    exit_code: int = 0
    output: str = ""  # Only populated in capture mode
    duration_ms: Optional[int] = None
    skipped: bool = False  # True if the script is disabled

    @property
    def success(self) -> bool:
        return self.exit_code == 0


def _signal_process_tree(process: subprocess.Popen, sig: int) -> None:
    """Send a signal to the process group, or just the process off POSIX."""
    if not _USE_PROCESS_GROUP and process.poll() is not None:
        return
    try:
        if _USE_PROCESS_GROUP:
            os.killpg(process.pid, sig)
        elif sig == signal.SIGTERM:
            process.terminate()
        else:
            process.kill()
    except (ProcessLookupError, PermissionError):
        # Group already gone
        pass


class ScriptRunner:
    """Execute Script definitions as shell subprocesses.

    Two output modes are supported: visible (the child inherits the caller's
    stdin/stdout/stderr) and capture (stdout and stderr are collected and
    returned, or attached to the raised error).
    """

    def __init__(self, runner_config: Optional[RunnerConfig] = None) -> None:
        self.config = runner_config or config.runner

    def build_environment(self, script: Script, ctx: ScriptContext) -> dict[str, str]:
        """Build the subprocess environment.

        Layers, later ones winning: the current process environment, the
        context variables (``<prefix>_EVENT`` etc.), ``ctx.environment`` and
        finally ``script.environment``.
        """
        prefix = self.config.env_prefix
        env = dict(os.environ)
        env[f"{prefix}_NAME"] = script.name
        env[f"{prefix}_EVENT"] = ctx.event
        env[f"{prefix}_COMMAND"] = ctx.command
        env[f"{prefix}_ARGS"] = shlex.join(ctx.args)
        env[f"{prefix}_EXTENSION"] = ctx.extension
        env[f"{prefix}_WORKING_DIR"] = ctx.working_dir or ""
        env.update(ctx.environment)
        env.update(script.environment)
        return env

    def run(
        self,
        token: Optional[CancelToken],
        script: Script,
        ctx: ScriptContext,
        capture: Optional[bool] = None,
    ) -> ScriptResult:
        """Run a script to completion, its timeout, or cancellation.

        Args:
            token: Cancellation token; its deadline also bounds the script
            script: The script definition
            ctx: Dispatch payload, exported to the script's environment
            capture: Capture output instead of inheriting the caller's
                streams (defaults to config)

        Returns:
            ScriptResult for a zero exit status or a disabled script

        Raises:
            ScriptExecutionFailed: Nonzero exit status or launch failure
            TimeoutExceeded: The effective deadline elapsed; process killed
            Cancelled: The token was cancelled; process killed
        """
        if not script.enabled:
            logger.debug(f"Script '{script.name}' is disabled, skipping")
            return ScriptResult(script_name=script.name, skipped=True)

        token = token or CancelToken()
        # Tighter of the caller's deadline and the script's own timeout
        run_token = token.child(timeout=script.timeout) if script.timeout > 0 else token
        if token.cancelled():
            raise Cancelled(script_name=script.name)
        if run_token.expired():
            raise TimeoutExceeded(script_name=script.name)

        if capture is None:
            capture = self.config.capture_output

        cwd = script.working_dir or ctx.working_dir or None
        logger.info(f"Executing script '{script.name}' for {ctx.event}")
        logger.debug(f"Script '{script.name}': {script.script} (cwd={cwd}, timeout={script.timeout}s)")

        start = time.monotonic()
        try:
            process = subprocess.Popen(
                script.script,
                shell=True,
                cwd=cwd,
                env=self.build_environment(script, ctx),
                stdout=subprocess.PIPE if capture else None,
                stderr=subprocess.STDOUT if capture else None,
                text=True,
                encoding="utf-8",
                errors="replace",
                start_new_session=_USE_PROCESS_GROUP,
            )
        except OSError as e:
            logger.error(f"Failed to start script '{script.name}': {e}")
            raise ScriptExecutionFailed(script.name, -1, str(e)) from e

        try:
            output = self._wait(process, run_token)
        except BaseException:
            # The child runs in its own session, so SIGINT never reaches it
            logger.warning(f"Script '{script.name}' interrupted, terminating pid {process.pid}")
            self._terminate(process)
            raise
        duration_ms = int((time.monotonic() - start) * 1000)

        if output is None:
            output = self._terminate(process)
            if token.cancelled():
                logger.warning(f"Script '{script.name}' cancelled after {duration_ms}ms")
                raise Cancelled(script_name=script.name)
            own_timeout = script.timeout if script.timeout > 0 and not token.expired() else None
            logger.warning(f"Script '{script.name}' timed out after {duration_ms}ms")
            raise TimeoutExceeded(timeout=own_timeout, script_name=script.name)

        if process.returncode != 0:
            logger.error(
                f"Script '{script.name}' exited with code {process.returncode} after {duration_ms}ms"
            )
            raise ScriptExecutionFailed(script.name, process.returncode, output)

        logger.info(f"Script '{script.name}' completed in {duration_ms}ms")
        return ScriptResult(
            script_name=script.name,
            exit_code=0,
            output=output,
            duration_ms=duration_ms,
        )

    def _wait(self, process: subprocess.Popen, token: CancelToken) -> Optional[str]:
        """Wait for exit while polling the token.

        Returns the collected output ("" in visible mode), or None if the token
        became done first. The process is left running in that case.
        """
        while True:
            step = self.config.poll_interval
            remaining = token.remaining()
            if remaining is not None:
                step = min(step, remaining)
            try:
                stdout, _ = process.communicate(timeout=step)
                return stdout or ""
            except subprocess.TimeoutExpired:
                if token.done():
                    return None

    def _terminate(self, process: subprocess.Popen) -> str:
        """Terminate the process tree, falling back to kill if needed.

        Returns whatever output was captured before it died.
        """
        _signal_process_tree(process, signal.SIGTERM)
        try:
            stdout, _ = process.communicate(timeout=self.config.terminate_grace)
            return stdout or ""
        except subprocess.TimeoutExpired:
            # Didn't terminate gracefully, force kill
            _signal_process_tree(process, getattr(signal, "SIGKILL", signal.SIGTERM))
        try:
            stdout, _ = process.communicate(timeout=self.config.kill_wait)
            return stdout or ""
        except subprocess.TimeoutExpired:
            logger.warning(f"Process {process.pid} did not respond to kill signal")
            return ""
