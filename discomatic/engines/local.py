"""Local subprocess execution engine."""

from __future__ import annotations

import subprocess
import threading
from pathlib import Path
from typing import Optional, Sequence

import structlog

from discomatic.utils.errors import ConfigurationError

from .base import ExecutionEngine

log = structlog.get_logger()

#: Seconds to let a utility command settle before feeding confirmations.
CONFIRM_GRACE_PERIOD = 1.0
#: How many ``Y`` lines are written to clear pending prompts.
CONFIRM_REPEATS = 5


class LocalEngine(ExecutionEngine):
    """Run tools as child processes of the current interpreter."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._process: Optional[subprocess.Popen] = None
        self.cancelled = threading.Event()
        self.last_output: str = ""

    def run(
        self,
        executable: str,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        confirm: bool = False,
    ) -> int:
        """Execute *executable* and block until it exits.

        Args:
            executable: Program to launch.
            args: Command line arguments.
            cwd: Optional working directory.
            confirm: Write ``Y`` to the process stdin after
                :data:`CONFIRM_GRACE_PERIOD` seconds and capture stdout into
                :attr:`last_output`.

        Returns:
            The process return code.  A cancelled run returns the code of
            the killed process.

        Raises:
            ConfigurationError: If *executable* cannot be launched.
        """
        cmd = [executable, *args]
        log.info("engine.run", executable=executable, args=list(args))
        pipes = (
            dict(stdin=subprocess.PIPE, stdout=subprocess.PIPE, text=True)
            if confirm
            else {}
        )
        try:
            process = subprocess.Popen(cmd, cwd=cwd, **pipes)
        except OSError as exc:
            log.error("engine.launch_failed", executable=executable, error=str(exc))
            raise ConfigurationError(f"Could not launch {executable}: {exc}") from exc

        with self._lock:
            self._process = process

        try:
            if confirm:
                returncode = self._confirm_and_wait(process)
            else:
                returncode = process.wait()
        finally:
            with self._lock:
                self._process = None

        if returncode != 0:
            log.warning("engine.nonzero_exit", executable=executable, returncode=returncode)
        return returncode

    def _confirm_and_wait(self, process: subprocess.Popen) -> int:
        try:
            process.wait(timeout=CONFIRM_GRACE_PERIOD)
        except subprocess.TimeoutExpired:
            log.debug("engine.still_running", pid=process.pid)
        try:
            stdout, _ = process.communicate(input="Y\n" * CONFIRM_REPEATS)
        except BrokenPipeError:
            log.debug("engine.stdin_closed", pid=process.pid)
            stdout = process.stdout.read() if process.stdout else ""
            process.wait()
        self.last_output = stdout or ""
        return process.returncode

    def cancel(self) -> None:
        """Kill the running process and mark the engine as cancelled."""
        self.cancelled.set()
        with self._lock:
            process = self._process
        if process is not None and process.poll() is None:
            log.info("engine.cancel", pid=process.pid)
            process.kill()
