"""UmdImageCreator verification backend (PSP UMD)."""

from __future__ import annotations

from typing import List

import structlog

from discomatic.models import BackendKind, Drive
from discomatic.record import SubmissionRecord

from ._logs import read_pvd, read_text, search_int, search_str
from .base import OutputFile, VerificationOnlyParameters

log = structlog.get_logger()


class UmdImageCreatorParameters(VerificationOnlyParameters):
    kind = BackendKind.UMD_IMAGE_CREATOR

    def output_files(self) -> List[OutputFile]:
        return [
            OutputFile("_disc.txt", pre_check=True, artifact="disc"),
            OutputFile("_mainError.txt", artifact="main_error"),
            OutputFile("_mainInfo.txt", pre_check=True, artifact="main_info"),
            OutputFile("_volDesc.txt", artifact="vol_desc"),
        ]

    def extract_submission_fields(
        self,
        record: SubmissionRecord,
        base_path: str,
        drive: Drive | None,
        include_artifacts: bool,
    ) -> None:
        disc = read_text(base_path + "_disc.txt")
        if disc is not None:
            common = record.common_disc_info
            title = search_str(r"^TITLE:\s*(.*)$", disc)
            if title:
                common.title = title
            serial = search_str(r"^DISC_ID:\s*(\S+)", disc)
            if serial:
                common.serial = serial
            version = search_str(r"^DISC_VERSION:\s*(\S+)", disc)
            if version:
                record.version_and_editions.version = version

            layerbreak = search_int(r"^L0 length:?\s+(\S+)", disc)
            if layerbreak:
                record.size_and_checksums.layerbreak = layerbreak
            size = search_int(r"^FileSize:\s*(\S+)", disc)
            if size is not None:
                record.size_and_checksums.size = size

        pvd = read_pvd(base_path + "_mainInfo.txt")
        if pvd:
            record.extras.pvd = pvd

        if include_artifacts:
            self.attach_artifacts(record, base_path)
        log.debug("uic.extracted", base_path=base_path)
