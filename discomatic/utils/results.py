"""Success/failure messages pushed from the pipelines to the caller.

The orchestrator and the extraction engine never print.  They hand
:class:`Result` objects to a *progress sink*: any callable accepting one
result.  The CLI passes :func:`log_progress`, tests usually pass
``list.append``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import structlog

log = structlog.get_logger()


@dataclass(frozen=True)
class Result:
    """Outcome of a step together with a human-readable message."""

    success: bool
    message: str = ""

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, message: str = "") -> "Result":
        return cls(True, message)

    @classmethod
    def failure(cls, message: str = "") -> "Result":
        return cls(False, message)


ProgressSink = Callable[[Result], None]


def log_progress(result: Result) -> None:
    """Default sink: forward each result to the structured log."""
    if result.success:
        log.info("progress", message=result.message)
    else:
        log.warning("progress.failure", message=result.message)


def report(sink: Optional[ProgressSink], result: Result) -> Result:
    """Send *result* to *sink* when one is configured and return it."""
    if sink is not None:
        sink(result)
    return result
