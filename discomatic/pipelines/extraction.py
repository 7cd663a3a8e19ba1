"""
Turn the output of a finished dump into a :class:`SubmissionRecord`.

:class:`ExtractionEngine` runs one fixed sequence per dump:

1. reject (system, media type) pairs outside :func:`media_types_for`;
2. strict output check through the backend parameters;
3. seed the record with placeholders;
4. backend log parsing;
5. catalog matching on the track SHA-1s (sequential, intersecting);
6. drop track data when whole-image checksums exist;
7. media rules (:mod:`._media_rules`);
8. system rules (:mod:`._system_rules`) including the scanner calls;
9. final category and comment defaults.

Collaborators (catalog client, protection scanner, progress sink) are
injected so tests can pass fakes.
"""

from __future__ import annotations

import os
from typing import Optional, Set

import structlog

from discomatic.catalog import CatalogClient
from discomatic.config.schema import Options
from discomatic.models import BackendKind, DiscCategory, DiscSystem, Drive, MediaType, YesNo, media_types_for
from discomatic.protection import DefaultProtectionScanner, ProtectionScanner
from discomatic.record import SubmissionRecord
from discomatic.tools import BackendParameters
from discomatic.tools._logs import read_text
from discomatic.utils.dat import iter_dat_entries
from discomatic.utils.paths import base_path as join_base_path
from discomatic.utils.results import ProgressSink, Result, report

from ._media_rules import apply_media_rules
from ._system_rules import SystemRule, apply_static_rule, rule_for
from .playstation import fill_from_system_cnf
from .types import ExtractionResult, ExtractionStatus, Placeholders

log = structlog.get_logger()

OTHER_EDITIONS_DEFAULT = "Original (VERIFY THIS)"
CHECK_PROTECTION = "(CHECK WITH PROTECTIONID)"
SCAN_ERROR = "An error occurred while scanning!"
LIBCRYPT_NO_SUBCHANNEL = "LibCrypt could not be detected because subchannel file is missing"
LIBCRYPT_UNREADABLE = "LibCrypt could not be detected because subchannel file could not be read"

_BOOT_CNF_SYSTEMS = frozenset({DiscSystem.SONY_PLAYSTATION, DiscSystem.SONY_PLAYSTATION_2})


class ExtractionEngine:
    """Build the submission record for one completed dump.

    Args:
        options: User options (placeholders, scanning, artifacts, login).
        parameters: Backend parameters of the run; their class decides which
            outputs are required and how logs are read.
        catalog: Optional catalog client; matching is skipped without one.
        scanner: Protection scanner; defaults to
            :class:`~discomatic.protection.DefaultProtectionScanner`.
        progress: Optional sink receiving :class:`Result` messages.
    """

    def __init__(
        self,
        options: Options,
        parameters: BackendParameters,
        catalog: CatalogClient | None = None,
        scanner: ProtectionScanner | None = None,
        progress: ProgressSink | None = None,
    ) -> None:
        self.options = options
        self.parameters = parameters
        self.catalog = catalog
        self.scanner = scanner if scanner is not None else DefaultProtectionScanner(options)
        self.scan_enabled = options.scan_for_protection and (
            scanner is not None or bool(options.protection_scanner)
        )
        self.progress = progress
        self.placeholders = Placeholders(enabled=options.add_placeholders)

    # ------------------------------------------------------------------ #
    # Entry point                                                        #
    # ------------------------------------------------------------------ #
    def extract(
        self,
        output_dir: str,
        output_filename: str,
        drive: Drive | None,
        system: DiscSystem | None,
        media_type: MediaType | None,
    ) -> ExtractionResult:
        if system is None or media_type not in media_types_for(system):
            error = f"{media_type} is not a valid media type for {system}"
            log.warning("extract.invalid_pair", system=system, media_type=media_type)
            return ExtractionResult(status=ExtractionStatus.FAILED, error=error)

        base = join_base_path(output_dir, output_filename)
        ok, missing = self.parameters.check_outputs_exist(base, pre_check=False)
        if not ok:
            log.warning("extract.missing_outputs", base_path=base, missing=missing)
            return ExtractionResult(status=ExtractionStatus.INCOMPLETE, missing=missing)

        try:
            record = self._seed(system, media_type)
            self.parameters.extract_submission_fields(
                record, base, drive, self.options.include_artifacts
            )
            self._match_catalog(record)

            if (record.size_and_checksums.crc32 or "").strip():
                record.tracks_and_write_offsets.clrmamepro_data = None

            apply_media_rules(record, media_type, self.placeholders)
            self._apply_system_rules(record, rule_for(system), system, drive, base)
            self._final_defaults(record)
        except Exception as exc:  # noqa: BLE001 – reported as a FAILED result
            log.exception("extract.failed", base_path=base)
            return ExtractionResult(status=ExtractionStatus.FAILED, error=str(exc))

        log.info("extract.complete", base_path=base, system=system, media_type=media_type)
        return ExtractionResult(status=ExtractionStatus.COMPLETE, record=record)

    # ------------------------------------------------------------------ #
    # Steps                                                              #
    # ------------------------------------------------------------------ #
    def _seed(self, system: DiscSystem, media_type: MediaType) -> SubmissionRecord:
        ph = self.placeholders
        record = SubmissionRecord()
        common = record.common_disc_info
        common.system = system
        common.media = media_type
        common.title = ph.required
        common.foreign_title = ph.optional
        common.disc_number = ph.optional
        common.disc_title = ph.optional
        common.serial = ph.required_if_exists
        common.barcode = ph.optional
        common.contents = ph.optional
        record.version_and_editions.version = ph.required_if_exists
        record.version_and_editions.other_editions = OTHER_EDITIONS_DEFAULT if ph.enabled else ""
        return record

    def _match_catalog(self, record: SubmissionRecord) -> None:
        dat = record.tracks_and_write_offsets.clrmamepro_data
        if not dat or self.catalog is None or not self.options.has_catalog_login:
            return

        record.dumpers_and_status.dumpers = [self.options.catalog_username]
        record.matched_ids = []

        logged_in = self.catalog.login()
        if logged_in is None:
            report(self.progress, Result.failure("There was an unknown error connecting to Redump"))
            return
        if not logged_in:
            log.info("extract.catalog_login_rejected")
            return

        report(self.progress, Result.ok("Finding disc matches on Redump..."))
        candidates: Optional[Set[int]] = None
        for entry in iter_dat_entries(dat):
            if not entry.sha1:
                continue
            found = self.catalog.search(entry.sha1)
            if found is None:
                report(
                    self.progress,
                    Result.failure(f"There was an error retrieving information from Redump for {entry.sha1}"),
                )
                candidates = set()
                break
            if not found:
                candidates = set()
                break
            candidates = set(found) if candidates is None else candidates & set(found)
            if not candidates:
                break

        matched = sorted(candidates or ())
        record.matched_ids = matched
        if matched:
            ids = ", ".join(str(i) for i in matched)
            report(self.progress, Result.ok(f"Match finding complete! Matched IDs: {ids}"))
        else:
            report(self.progress, Result.ok("Match finding complete! No matches found"))

        if len(matched) == 1:
            self._fill_from_catalog(record, matched[0])

    def _fill_from_catalog(self, record: SubmissionRecord, disc_id: int) -> None:
        """Pre-fill unset fields from catalog entry *disc_id*."""
        fields = self.catalog.disc_fields(disc_id)
        if fields is None:
            report(self.progress, Result.failure(f"Could not retrieve disc {disc_id} from Redump"))
            return

        ph = self.placeholders
        common = record.common_disc_info
        for key in ("title", "foreign_title", "disc_number", "disc_title", "serial", "errors_count", "contents"):
            if key in fields and ph.is_placeholder(getattr(common, key)):
                setattr(common, key, fields[key])
        for key in ("category", "region", "languages"):
            if key in fields and not getattr(common, key):
                setattr(common, key, fields[key])

        versions = record.version_and_editions
        if "version" in fields and ph.is_placeholder(versions.version):
            versions.version = fields["version"]
        if "edition" in fields and (
            ph.is_placeholder(versions.other_editions) or versions.other_editions == OTHER_EDITIONS_DEFAULT
        ):
            versions.other_editions = fields["edition"]

        dumpers = record.dumpers_and_status.dumpers
        for name in fields.get("dumpers", []):
            if name not in dumpers:
                dumpers.append(name)

        if fields.get("comments"):
            if ph.is_placeholder(common.comments):
                common.comments = fields["comments"]
            else:
                common.comments = f"{common.comments}\n{fields['comments']}"

        record.added = fields.get("added", record.added)
        record.last_modified = fields.get("last_modified", record.last_modified)
        log.info("extract.catalog_fill", disc_id=disc_id)

    def _apply_system_rules(
        self,
        record: SubmissionRecord,
        rule: SystemRule,
        system: DiscSystem,
        drive: Drive | None,
        base: str,
    ) -> None:
        apply_static_rule(record, rule, self.placeholders)
        target = (drive.mount_path or drive.device) if drive is not None else None

        if rule.protection_scan:
            record.copy_protection.protection = self._scan_protection(target)

        if rule.anti_modchip and target is not None:
            detected = self.scanner.anti_modchip_detected(target)
            record.copy_protection.anti_modchip = YesNo.YES if detected else YesNo.NO

        if rule.libcrypt and self.parameters.kind is BackendKind.DISC_IMAGE_CREATOR:
            self._check_libcrypt(record, base)

        if system in _BOOT_CNF_SYSTEMS and drive is not None:
            fill_from_system_cnf(record, drive.mount_path)

    def _scan_protection(self, target) -> str:
        if not self.scan_enabled or target is None:
            return CHECK_PROTECTION
        ok, found = self.scanner.scan(target)
        if not ok:
            log.warning("extract.protection_scan_failed", detail=found)
            return SCAN_ERROR
        return found

    def _check_libcrypt(self, record: SubmissionRecord, base: str) -> None:
        protection = record.copy_protection
        sub_path = base + ".sub"
        if not os.path.isfile(sub_path):
            protection.libcrypt = YesNo.NULL
            protection.libcrypt_data = LIBCRYPT_NO_SUBCHANNEL
            return

        verdict = self.scanner.libcrypt_detected(sub_path)
        if verdict is None:
            protection.libcrypt = YesNo.NULL
            protection.libcrypt_data = LIBCRYPT_UNREADABLE
        elif verdict:
            intention = (read_text(base + "_subIntention.txt") or "").strip()
            if intention:
                protection.libcrypt = YesNo.YES
                protection.libcrypt_data = intention
            else:
                protection.libcrypt = YesNo.NO
        else:
            protection.libcrypt = YesNo.NO

    def _final_defaults(self, record: SubmissionRecord) -> None:
        common = record.common_disc_info
        if common.category is None:
            common.category = DiscCategory.GAMES
        if not (common.comments or "").strip():
            common.comments = self.placeholders.optional
