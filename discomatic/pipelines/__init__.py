"""
Public façade for the *pipelines* sub-package.

This module exposes the high-level helpers used by the CLI and by other
internal components:

* **Dump orchestration**
    * :class:`DumpOrchestrator`

* **Submission extraction**
    * :class:`ExtractionEngine`
    * :class:`ExtractionResult`, :class:`ExtractionStatus`

* **Shared value object**
    * :class:`Placeholders`

Importing from ``discomatic.pipelines`` rather than individual modules keeps
call-sites stable even when underlying filenames change.
"""

from __future__ import annotations

# ────────────────────────────────────────────────────────────────────────────
# Public helpers – ordered roughly chronologically for a typical run.
# (1)  Dump → (2)  Extract.
# ────────────────────────────────────────────────────────────────────────────
from .types import ExtractionResult, ExtractionStatus, Placeholders
from .dump import DumpOrchestrator, support_status
from .extraction import ExtractionEngine
from ._media_rules import MEDIA_RULES
from ._system_rules import SYSTEM_RULES

__all__: list[str] = [
    # Orchestration
    "DumpOrchestrator",
    "support_status",
    # Extraction
    "ExtractionEngine",
    "ExtractionResult",
    "ExtractionStatus",
    # Rule tables
    "MEDIA_RULES",
    "SYSTEM_RULES",
    # Shared value object
    "Placeholders",
]
