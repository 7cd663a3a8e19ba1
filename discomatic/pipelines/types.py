"""
Value objects that circulate between the extraction and dump stages.

Every result class inherits from :class:`pydantic.BaseModel` with
``frozen=True`` so that a finished run cannot be altered by the caller.
The :class:`~discomatic.record.SubmissionRecord` it carries stays mutable
for the optional human review step.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from discomatic.record import SubmissionRecord

REQUIRED = "(REQUIRED)"
REQUIRED_IF_EXISTS = "(REQUIRED, IF EXISTS)"
OPTIONAL = "(OPTIONAL)"


class Placeholders(BaseModel, frozen=True):
    """Marker strings for fields a human still has to fill in.

    With ``enabled`` off every marker collapses to the empty string.
    """

    enabled: bool = True

    @property
    def required(self) -> str:
        return REQUIRED if self.enabled else ""

    @property
    def required_if_exists(self) -> str:
        return REQUIRED_IF_EXISTS if self.enabled else ""

    @property
    def optional(self) -> str:
        return OPTIONAL if self.enabled else ""

    def is_placeholder(self, value: object) -> bool:
        """Return ``True`` for unset values: ``None``, blank or a marker."""
        if value is None:
            return True
        if isinstance(value, str):
            return value.strip() in {"", REQUIRED, REQUIRED_IF_EXISTS, OPTIONAL}
        return False


class ExtractionStatus(str, Enum):
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"
    FAILED = "failed"


class ExtractionResult(BaseModel, frozen=True):
    """Terminal state of one extraction run.

    Attributes
    ----------
    status
        ``COMPLETE`` with a record, ``INCOMPLETE`` with the missing files,
        or ``FAILED`` with an error message.
    record
        The populated record; ``None`` unless the run completed.
    missing
        Full paths of expected outputs that were absent.
    error
        Description of the failure for ``FAILED`` runs.
    """

    status: ExtractionStatus
    record: Optional[SubmissionRecord] = None
    missing: List[str] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is ExtractionStatus.COMPLETE
