"""Execution back-ends for running external dump tools."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence


class ExecutionEngine(ABC):
    """Abstract execution engine.

    Concrete implementations launch the external dump tool and report its
    exit status.  A run may be cancelled from another thread; cancellation
    must make :meth:`run` return promptly.
    """

    @abstractmethod
    def run(
        self,
        executable: str,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        confirm: bool = False,
    ) -> int:
        """Run *executable* with *args* and wait for it to exit.

        Args:
            executable: Program to launch.
            args: Command line arguments, already tokenized.
            cwd: Optional working directory.
            confirm: Feed confirmation input (``Y``) after a short grace
                period.  Used for drive utility commands that may stop on
                a prompt.

        Returns:
            Process return code.
        """
        raise NotImplementedError

    @abstractmethod
    def cancel(self) -> None:
        """Terminate the running process, if any."""
        raise NotImplementedError
