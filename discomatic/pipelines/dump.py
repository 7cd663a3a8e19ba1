"""
End-to-end dump orchestration.

:class:`DumpOrchestrator` ties one :class:`~discomatic.models.DumpRequest` to
its backend parameters and drives the run:

* :meth:`~DumpOrchestrator.validate` – configuration checks before anything
  touches the drive;
* :meth:`~DumpOrchestrator.run` – one blocking call to the execution engine;
* :meth:`~DumpOrchestrator.verify_and_save` – output check, extraction,
  report writing and log compression.

Progress is pushed as :class:`~discomatic.utils.results.Result` objects to an
optional sink.  :meth:`~DumpOrchestrator.cancel` may be called from another
thread; once it has been called, extraction is never started.
"""

from __future__ import annotations

import os
import shutil
import threading
from typing import Callable, Optional, Tuple

import structlog

from discomatic.catalog import CatalogClient, CatalogWebClient
from discomatic.config.schema import Options
from discomatic.engines import ExecutionEngine, LocalEngine
from discomatic.models import BackendKind, DriveKind, DumpRequest, MediaType
from discomatic.protection import ProtectionScanner
from discomatic.record import SubmissionRecord
from discomatic.report import compress_log_files, format_output_data, write_output_data, write_output_json
from discomatic.tools import BackendParameters, build_parameters, create_parameters
from discomatic.tools.discimagecreator import DiscImageCreatorParameters
from discomatic.utils.errors import ConfigurationError
from discomatic.utils.paths import base_path, normalize_output_paths
from discomatic.utils.results import ProgressSink, Result, report

from .extraction import ExtractionEngine
from .types import ExtractionStatus

log = structlog.get_logger()

#: Human review hook: receives the record, returns ``(accepted, record)``.
UserInfoCallback = Callable[[SubmissionRecord], Tuple[Optional[bool], SubmissionRecord]]

_READY_MEDIA = frozenset(
    {
        MediaType.CDROM,
        MediaType.DVD,
        MediaType.HDDVD,
        MediaType.FLOPPY_DISK,
        MediaType.HARD_DISK,
        MediaType.COMPACT_FLASH,
        MediaType.SD_CARD,
        MediaType.FLASH_DRIVE,
    }
)
_PARTIAL_MEDIA = frozenset({MediaType.GDROM, MediaType.BLURAY})


def support_status(media_type: MediaType) -> Result:
    """Return whether *media_type* can be dumped from a PC drive."""
    name = media_type.long_name
    if media_type is MediaType.NONE:
        return Result.failure("Please select a valid media type")
    if media_type in _READY_MEDIA:
        return Result.ok(f"{name} ready to dump")
    if media_type in _PARTIAL_MEDIA:
        return Result.ok(f"{name} partially supported for dumping")
    if media_type in (MediaType.NINTENDO_GAMECUBE_GAME_DISC, MediaType.NINTENDO_WII_OPTICAL_DISC):
        return Result.failure(f"{name} can only be dumped on a console with CleanRip")
    if media_type is MediaType.UMD:
        return Result.failure(f"{name} can only be dumped on a PSP with UmdImageCreator")
    return Result.failure(f"{name} can not be dumped")


def resolve_executable(path: str | None) -> Optional[str]:
    """Return the full path of *path* (file or ``PATH`` lookup) or ``None``."""
    if not path:
        return None
    if os.path.isfile(path):
        return os.path.abspath(path)
    return shutil.which(path)


class DumpOrchestrator:
    """Drive one dump from validation to written report.

    Args:
        request: What to dump and where.
        options: User options.
        engine: Execution engine; a :class:`LocalEngine` by default.
        catalog: Catalog client; built from the options when a login is
            configured.
        scanner: Protection scanner handed to the extraction engine.
        progress: Optional progress sink.
        parameters: Raw argument string overriding the generated one.
    """

    def __init__(
        self,
        request: DumpRequest,
        options: Options,
        *,
        engine: ExecutionEngine | None = None,
        catalog: CatalogClient | None = None,
        scanner: ProtectionScanner | None = None,
        progress: ProgressSink | None = None,
        parameters: str | None = None,
    ) -> None:
        self.request = request
        self.options = options
        self.engine = engine if engine is not None else LocalEngine()
        if catalog is None and options.has_catalog_login:
            catalog = CatalogWebClient.from_options(options)
        self.catalog = catalog
        self.scanner = scanner
        self.progress = progress
        self.record: Optional[SubmissionRecord] = None

        self._cancelled = threading.Event()
        self._running = threading.Event()

        self.output_directory = request.output_directory
        self.output_filename = request.output_filename
        self._normalize_paths()

        if parameters is not None:
            self.parameters = self.set_parameters(parameters)
        else:
            self.parameters = self.full_parameters(request.drive_speed)

    # ------------------------------------------------------------------ #
    # Parameters                                                         #
    # ------------------------------------------------------------------ #
    @property
    def backend(self) -> BackendKind:
        return self.request.backend

    def _normalize_paths(self) -> None:
        directory, filename = normalize_output_paths(
            self.output_directory,
            self.output_filename,
            replace_periods=self.backend is BackendKind.DISC_IMAGE_CREATOR,
        )
        self.output_directory, self.output_filename = directory, filename

    def set_parameters(self, argument_string: str) -> BackendParameters:
        """Replace the parameters with a parsed *argument_string*."""
        self.parameters = create_parameters(
            self.backend,
            argument_string,
            self.options.executable_for(self.backend),
            self.request.system,
            self.request.media_type,
        )
        return self.parameters

    def full_parameters(self, speed: int | None = None) -> BackendParameters:
        """Rebuild the parameters from the request at *speed*."""
        self.parameters = build_parameters(
            self.backend,
            self.request.system,
            self.request.media_type,
            self.request.drive,
            os.path.join(self.output_directory, self.output_filename),
            speed,
            self.options,
        )
        return self.parameters

    def parameters_valid(self) -> bool:
        """Parameter validity plus drive/media consistency."""
        if not self.parameters.is_valid():
            return False
        drive = self.request.drive
        if drive is None:
            return True
        media = self.request.media_type
        if (drive.kind is DriveKind.FLOPPY) != (media is MediaType.FLOPPY_DISK):
            return False
        removable_drive = drive.kind in (DriveKind.REMOVABLE, DriveKind.HARD_DISK)
        return removable_drive == media.is_removable_storage

    # ------------------------------------------------------------------ #
    # Validation and execution                                           #
    # ------------------------------------------------------------------ #
    def validate(self) -> Result:
        """Check the configuration before a dump; the first problem wins."""
        if not self.parameters_valid():
            return Result.failure("Error! Current configuration is not supported!")

        self._normalize_paths()
        drive = self.request.drive
        if drive is not None and drive.holds(self.output_directory):
            return Result.failure("Error! Cannot output to same drive that is being dumped!")

        if not self.backend.supports_dumping:
            return Result.failure(f"Error! {self.backend.value} output can only be verified!")

        configured = self.options.executable_for(self.backend)
        executable = resolve_executable(configured)
        if executable is None:
            return Result.failure(f"Error! {configured} does not exist!")
        if drive is not None and drive.holds(executable):
            return Result.failure("Error! Cannot dump same drive that executable resides on!")

        return support_status(self.request.media_type)

    def run(self) -> Result:
        """Validate, then execute the backend and wait for it."""
        result = self.validate()
        if not result:
            return report(self.progress, result)
        report(self.progress, result)

        if self._cancelled.is_set():
            return report(self.progress, Result.failure("Dump cancelled!"))

        os.makedirs(self.output_directory or ".", exist_ok=True)
        report(self.progress, Result.ok(f"Executing {self.backend.value}... please wait!"))
        self._running.set()
        try:
            returncode = self.parameters.execute(self.engine)
        except (ConfigurationError, ValueError) as exc:
            return report(self.progress, Result.failure(f"Error! {exc}"))
        finally:
            self._running.clear()

        if self._cancelled.is_set():
            return report(self.progress, Result.failure("Dump cancelled!"))
        log.info("dump.finished", backend=self.backend.value, returncode=returncode)
        return report(self.progress, Result.ok(f"{self.backend.value} has finished!"))

    def cancel(self) -> None:
        """Stop the running backend; extraction will not start afterwards."""
        self._cancelled.set()
        self.engine.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    # ------------------------------------------------------------------ #
    # Drive utilities                                                    #
    # ------------------------------------------------------------------ #
    def eject(self) -> Result:
        return self._drive_utility("eject")

    def reset_drive(self) -> Result:
        return self._drive_utility("reset")

    def _drive_utility(self, command: str) -> Result:
        """Run a DiscImageCreator drive command, answering its prompts."""
        configured = self.options.dic_path
        executable = resolve_executable(configured)
        if executable is None:
            return Result.failure(f"Error! {configured} does not exist!")

        if self._running.is_set():
            self.cancel()

        drive = self.request.drive
        if drive is None or drive.kind is not DriveKind.OPTICAL:
            return Result.failure(f"Error! Cannot {command} a drive that is not optical")

        params = DiscImageCreatorParameters.drive_command(command, drive, executable)
        try:
            spec = params.build_spec()
            returncode = self.engine.run(spec.executable, spec.args, confirm=True)
        except (ConfigurationError, ValueError) as exc:
            return Result.failure(f"Error! {exc}")
        log.info("dump.drive_utility", command=command, returncode=returncode)
        return Result.ok(f"Drive {command} complete")

    # ------------------------------------------------------------------ #
    # Verification                                                       #
    # ------------------------------------------------------------------ #
    def _report_missing(self, missing) -> Result:
        report(
            self.progress,
            Result.failure("There were files missing from the output:\n" + "\n".join(missing)),
        )
        return report(
            self.progress,
            Result.failure("Error! Please check output directory as dump may be incomplete!"),
        )

    def verify_and_save(self, process_user_info: UserInfoCallback | None = None) -> Result:
        """Check outputs, extract the record and write the report files."""
        sink = self.progress
        report(sink, Result.ok("Gathering submission information... please wait!"))
        if self._cancelled.is_set():
            return report(sink, Result.failure("Dump was cancelled; no information gathered"))

        base = base_path(self.output_directory, self.output_filename)
        found, missing = self.parameters.check_outputs_exist(base, pre_check=False)
        if not found:
            return self._report_missing(missing)

        report(sink, Result.ok("Extracting output information from output files..."))
        extraction = ExtractionEngine(
            self.options,
            self.parameters,
            catalog=self.catalog,
            scanner=self.scanner,
            progress=sink,
        ).extract(
            self.output_directory,
            self.output_filename,
            self.request.drive,
            self.request.system,
            self.request.media_type,
        )
        if extraction.status is ExtractionStatus.INCOMPLETE:
            return self._report_missing(extraction.missing)
        if extraction.status is ExtractionStatus.FAILED:
            return report(sink, Result.failure(f"Error! {extraction.error}"))
        record = extraction.record
        report(sink, Result.ok("Extracting complete!"))

        if self.options.eject_after_dump:
            report(sink, Result.ok("Ejecting disc in drive..."))
            report(sink, self.eject())
        elif self.backend is BackendKind.DISC_IMAGE_CREATOR and self.options.dic_reset_drive_after_dump:
            report(sink, Result.ok("Resetting drive..."))
            report(sink, self.reset_drive())

        if self.options.prompt_for_disc_information and process_user_info is not None:
            accepted, edited = process_user_info(record)
            if accepted:
                record = edited
                report(sink, Result.ok("Additional disc information added!"))
            else:
                report(sink, Result.ok("Disc information skipped!"))
        self.record = record

        report(sink, Result.ok("Formatting information..."))
        lines = format_output_data(record)
        if lines is None:
            return report(sink, Result.failure("Error! Formatting of submission information failed!"))

        report(sink, Result.ok("Writing information to !submissionInfo.txt..."))
        if write_output_data(self.output_directory, lines):
            report(sink, Result.ok("Writing complete!"))
        else:
            report(sink, Result.failure("Writing could not complete!"))

        if self.options.output_submission_json:
            report(sink, Result.ok("Writing information to !submissionInfo.json.gz..."))
            if write_output_json(self.output_directory, record):
                report(sink, Result.ok("Writing complete!"))
            else:
                report(sink, Result.failure("Writing could not complete!"))

        if self.options.compress_log_files:
            report(sink, Result.ok("Compressing log files..."))
            if compress_log_files(self.output_directory, self.output_filename, self.parameters):
                report(sink, Result.ok("Compression complete!"))
            else:
                report(sink, Result.failure("Compression could not complete!"))

        return report(sink, Result.ok("Submission information process complete!"))
