"""Base classes for external dump tools.

Every backend is described by a :class:`BackendParameters` subclass that
knows how to

* build and re-parse its command line (:meth:`~BackendParameters.build`,
  :meth:`~BackendParameters.generate`, :meth:`~BackendParameters.parse`);
* enumerate the files a run must leave behind
  (:meth:`~BackendParameters.output_files`);
* read those files back into a :class:`~discomatic.record.SubmissionRecord`
  (:meth:`~BackendParameters.extract_submission_fields`).

The class is selected once per run from :data:`discomatic.tools.PARAMETER_TYPES`
and never re-dispatched.
"""

from __future__ import annotations

import base64
import os
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, List, Optional, Sequence, Tuple

from discomatic.config.schema import Options
from discomatic.engines import ExecutionEngine
from discomatic.models import BackendKind, DiscSystem, Drive, MediaType
from discomatic.record import SubmissionRecord

_TOKEN_RE = re.compile(r'(?:[^\s"]+|"[^"]*")+')


@dataclass
class ToolSpec:
    """Specification returned by :meth:`Tool.build_spec`.

    Attributes mirror the arguments of :meth:`ExecutionEngine.run`.
    """

    executable: str
    args: Sequence[str]
    confirm: bool = False


class Tool:
    """Base class for wrappers around external utilities."""

    def execute(self, engine: ExecutionEngine) -> int:
        """Build a :class:`ToolSpec` and execute it with *engine*."""
        spec = self.build_spec()
        return engine.run(spec.executable, spec.args, confirm=spec.confirm)

    def build_spec(self) -> ToolSpec:
        """Return a :class:`ToolSpec` describing how to run this tool."""
        raise NotImplementedError


@dataclass(frozen=True)
class OutputFile:
    """One file a backend is expected to write next to the base path.

    Attributes:
        suffix: Appended verbatim to the base path (``".cue"``, ``"_disc.txt"``).
        pre_check: Must already exist before a re-verification pass.
        required: Checked by the strict post-run check.
        is_log: Eligible for log compression after a successful run.
        artifact: Key under which the file is attached to the record when
            artifacts are requested.
    """

    suffix: str
    pre_check: bool = False
    required: bool = True
    is_log: bool = True
    artifact: Optional[str] = None

    def path(self, base_path: str) -> str:
        return base_path + self.suffix


def split_arguments(argument_string: str | None) -> List[str]:
    """Tokenize a command line, keeping double-quoted segments together.

    Quotes are removed from the returned tokens, so ``of="a b.iso"`` yields
    ``of=a b.iso``.
    """
    if not argument_string:
        return []
    return [token.replace('"', "") for token in _TOKEN_RE.findall(argument_string)]


def quote(value: str) -> str:
    return f'"{value}"'


def parse_int(value: str | None) -> Optional[int]:
    """Return *value* as ``int`` (decimal or ``0x`` hex) or ``None``."""
    if value is None:
        return None
    try:
        return int(value, 0) if value.lower().startswith("0x") else int(value)
    except ValueError:
        return None


class BackendParameters(Tool, ABC):
    """Command line and output contract of one backend.

    Instances are created either from a raw argument string (parsed) or via
    :meth:`build` from the dump selection (generated).

    Args:
        argument_string: Optional command line to parse.
        system: Disc system of the run.
        media_type: Media type of the run.
        executable_path: Program that receives the generated arguments.
    """

    kind: ClassVar[BackendKind]

    def __init__(
        self,
        argument_string: str | None = None,
        *,
        system: DiscSystem | None = None,
        media_type: MediaType | None = None,
        executable_path: str | None = None,
    ) -> None:
        self.system = system
        self.media_type = media_type
        self.executable_path = executable_path
        self.base_command: Optional[str] = None
        self.drive: Optional[str] = None
        self.filename: Optional[str] = None
        self.speed: Optional[int] = None
        self._valid = False
        if argument_string is not None:
            self.parse(argument_string)

    # ------------------------------------------------------------------ #
    # Command line                                                       #
    # ------------------------------------------------------------------ #
    @classmethod
    @abstractmethod
    def build(
        cls,
        system: DiscSystem | None,
        media_type: MediaType | None,
        drive: Drive | None,
        filename: str,
        speed: int | None,
        options: Options,
    ) -> "BackendParameters":
        """Return parameters for a fresh dump of the given selection."""

    @abstractmethod
    def generate(self) -> Optional[str]:
        """Return the argument string or ``None`` when it cannot be built."""

    @abstractmethod
    def parse(self, argument_string: str) -> bool:
        """Load state from *argument_string*; return whether it was valid."""

    def is_valid(self) -> bool:
        return self._valid

    def build_spec(self) -> ToolSpec:
        """Return the :class:`ToolSpec` for the current arguments.

        Raises:
            ValueError: If no executable is configured or the arguments
                cannot be generated.
        """
        arguments = self.generate()
        if not self.executable_path or arguments is None:
            raise ValueError(f"{self.kind.value} parameters are not executable")
        return ToolSpec(self.executable_path, split_arguments(arguments))

    # ------------------------------------------------------------------ #
    # Output contract                                                    #
    # ------------------------------------------------------------------ #
    @abstractmethod
    def output_files(self) -> List[OutputFile]:
        """Return every file the current command is expected to produce."""

    def expected_outputs(self, base_path: str) -> List[str]:
        """Return full paths of the required outputs for *base_path*."""
        return [f.path(base_path) for f in self.output_files() if f.required]

    def check_outputs_exist(self, base_path: str, pre_check: bool) -> Tuple[bool, List[str]]:
        """Check the outputs for *base_path*.

        Args:
            base_path: Output directory joined with the extension-less
                filename.
            pre_check: Lenient mode; only files flagged ``pre_check`` are
                considered.

        Returns:
            ``(all_present, missing_paths)``.
        """
        candidates = [
            f for f in self.output_files()
            if (f.pre_check if pre_check else f.required)
        ]
        missing = [f.path(base_path) for f in candidates if not os.path.exists(f.path(base_path))]
        return not missing, missing

    def log_file_paths(self, base_path: str) -> List[str]:
        """Return existing log files for *base_path*, in declaration order."""
        return [
            f.path(base_path)
            for f in self.output_files()
            if f.is_log and os.path.isfile(f.path(base_path))
        ]

    # ------------------------------------------------------------------ #
    # Extraction                                                         #
    # ------------------------------------------------------------------ #
    @abstractmethod
    def extract_submission_fields(
        self,
        record: SubmissionRecord,
        base_path: str,
        drive: Drive | None,
        include_artifacts: bool,
    ) -> None:
        """Fill backend-derived fields of *record* from the files at *base_path*."""

    def attach_artifacts(self, record: SubmissionRecord, base_path: str) -> None:
        """Store base64 copies of artifact files on *record*."""
        for output in self.output_files():
            if output.artifact is None:
                continue
            path = output.path(base_path)
            if os.path.isfile(path):
                with open(path, "rb") as stream:
                    record.artifacts[output.artifact] = base64.b64encode(stream.read()).decode("ascii")


class VerificationOnlyParameters(BackendParameters):
    """Backends whose output is verified but never produced by discomatic.

    The command line is always empty; only an empty argument string is valid.
    """

    def __init__(
        self,
        argument_string: str | None = None,
        *,
        system: DiscSystem | None = None,
        media_type: MediaType | None = None,
        executable_path: str | None = None,
    ) -> None:
        super().__init__(
            argument_string,
            system=system,
            media_type=media_type,
            executable_path=None,
        )
        if argument_string is None:
            self._valid = True

    @classmethod
    def build(cls, system, media_type, drive, filename, speed, options):
        params = cls(system=system, media_type=media_type)
        params.filename = filename
        return params

    def generate(self) -> Optional[str]:
        return ""

    def parse(self, argument_string: str) -> bool:
        self._valid = not (argument_string or "").strip()
        return self._valid
