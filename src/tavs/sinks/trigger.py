"""Trigger script sink for subprocess-based terminal signalling.

Runs ``bash <trigger.sh> <state>`` detached from the caller. Escape sequences
and palettes live entirely in the script; this module only launches it.
"""

import asyncio
import os
import signal
import subprocess
from collections.abc import Mapping
from pathlib import Path

from .. import config
from ..telemetry import get_logger, metrics
from ..types import SignalState
from .base import SignalSink, SinkInvocationFailed, SinkResult

logger = get_logger(__name__)

_PACKAGE_DIR = Path(__file__).resolve().parent.parent

# Searched after the explicit path, in order
_RELATIVE_CANDIDATES = (
    "../../core/trigger.sh",
    "../../../src/core/trigger.sh",
)
_HOME_CANDIDATES = (
    ".claude/hooks/tavs/src/core/trigger.sh",
    ".opencode/plugins/tavs/trigger.sh",
)
_SYSTEM_CANDIDATES = ("/usr/local/share/tavs/trigger.sh",)


def trigger_script_candidates(
    explicit: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> list[Path]:
    """List trigger script locations in search order.

    Args:
        explicit: Configured path, searched first.
        environ: Environment used to resolve the home directory.

    Returns:
        Candidate paths (not checked for existence).
    """
    env = os.environ if environ is None else environ
    candidates: list[Path] = []

    if explicit:
        candidates.append(Path(explicit).expanduser())

    candidates.extend((_PACKAGE_DIR / rel).resolve() for rel in _RELATIVE_CANDIDATES)

    home = env.get("HOME") or env.get("USERPROFILE") or ""
    if home:
        candidates.extend(Path(home) / rel for rel in _HOME_CANDIDATES)

    candidates.extend(Path(p) for p in _SYSTEM_CANDIDATES)
    return candidates


def find_trigger_script(
    explicit: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path | None:
    """Return the first existing trigger script, or None."""
    for candidate in trigger_script_candidates(explicit, environ):
        if candidate.is_file():
            return candidate
    return None


class TriggerScriptSink(SignalSink):
    """Sink that launches the trigger script per signal.

    ``send`` schedules the subprocess on the running loop and returns at once;
    the caller never awaits it. Spawn errors, timeouts and non-zero exits are
    reported only through logging and the ``sink.errors`` counter.
    """

    name = "trigger"

    def __init__(
        self,
        script: str | Path,
        timeout: float | None = None,
        shell: str = "bash",
        debug: bool = False,
    ):
        """Initialize TriggerScriptSink.

        Args:
            script: Path to trigger.sh.
            timeout: Seconds before a hung invocation is killed.
            shell: Interpreter used to run the script.
            debug: Log failures at warning level instead of debug.
        """
        self.script = Path(script)
        self.timeout = timeout if timeout is not None else config.SINK_TIMEOUT_SECONDS
        self.shell = shell
        self.debug = debug
        self._tasks: set[asyncio.Task] = set()

    @property
    def available(self) -> bool:
        return self.script.is_file()

    def _command(self, state: SignalState) -> list[str]:
        return [self.shell, str(self.script), state.value]

    def send(self, state: SignalState) -> SinkResult:
        """Launch the script without waiting for it."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return self._spawn_detached(state)

        task = loop.create_task(self._run(state))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return SinkResult.success()

    def _spawn_detached(self, state: SignalState) -> SinkResult:
        """Fallback when no event loop is running."""
        try:
            subprocess.Popen(
                self._command(state),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            return self._failure(state, f"spawn failed: {e}")
        return SinkResult.success()

    async def _run(self, state: SignalState) -> None:
        try:
            proc = await asyncio.create_subprocess_exec(
                *self._command(state),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as e:
            self._background_failure(state, f"spawn failed: {e}")
            return

        try:
            _, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            # Detached session: the script and its children share pgid == pid
            try:
                os.killpg(proc.pid, signal.SIGKILL)
            except ProcessLookupError:
                pass
            await proc.wait()
            self._background_failure(state, f"timed out after {self.timeout}s")
            return

        if proc.returncode != 0:
            detail = stderr.decode(errors="replace").strip() if stderr else ""
            self._background_failure(state, f"exit {proc.returncode}: {detail}")

    def send_sync(self, state: SignalState) -> SinkResult:
        """Run the script and block until it finishes."""
        try:
            result = subprocess.run(
                self._command(state),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            return self._failure(state, f"timed out after {self.timeout}s")
        except OSError as e:
            return self._failure(state, f"spawn failed: {e}")

        if result.returncode != 0:
            detail = result.stderr.decode(errors="replace").strip() if result.stderr else ""
            return self._failure(state, f"exit {result.returncode}: {detail}")
        return SinkResult.success()

    def _failure(self, state: SignalState, message: str) -> SinkResult:
        error = SinkInvocationFailed(f"trigger {state.value}: {message}")
        if self.debug:
            logger.warning(f"[TriggerSink] {error}")
        else:
            logger.debug(f"[TriggerSink] {error}")
        return SinkResult.failure(error)

    def _background_failure(self, state: SignalState, message: str) -> None:
        # Nobody receives this result; the counter is the only trace
        result = self._failure(state, message)
        if config.METRICS_ENABLED:
            metrics.inc("sink.errors", {"kind": result.error.kind})

    async def close(self) -> None:
        """Wait for in-flight invocations to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def in_flight(self) -> int:
        return len(self._tasks)
