"""
Pydantic model that mirrors ``options.yaml``.

Every knob that changes how a dump is built, verified or reported lives on
:class:`Options`.  Unknown keys are rejected so that a misspelled option
fails loudly at start-up rather than being silently ignored.
"""

from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from discomatic.models import BackendKind, DiscSystem, MediaType


class Options(BaseModel):
    """User options for dumping and report generation."""

    model_config = ConfigDict(extra="forbid")

    # --------------------------------------------------------------------- #
    # Backend selection and executables                                     #
    # --------------------------------------------------------------------- #
    backend: BackendKind = BackendKind.DISC_IMAGE_CREATOR
    aaru_path: Optional[str] = "aaru"
    dd_path: Optional[str] = "dd"
    dic_path: Optional[str] = "DiscImageCreator"
    default_system: Optional[DiscSystem] = None

    # --------------------------------------------------------------------- #
    # Report generation                                                     #
    # --------------------------------------------------------------------- #
    add_placeholders: bool = True
    scan_for_protection: bool = True
    include_artifacts: bool = False
    output_submission_json: bool = False
    compress_log_files: bool = True
    prompt_for_disc_information: bool = False

    # --------------------------------------------------------------------- #
    # Post-dump drive handling                                              #
    # --------------------------------------------------------------------- #
    eject_after_dump: bool = False
    dic_reset_drive_after_dump: bool = False

    # --------------------------------------------------------------------- #
    # DiscImageCreator tuning                                               #
    # --------------------------------------------------------------------- #
    dic_quiet_mode: bool = False
    dic_paranoid_mode: bool = False
    dic_use_cmi_flag: bool = False
    dic_c2_reread_count: int = Field(20, ge=0)
    dic_dvd_reread_count: int = Field(10, ge=0)

    # --------------------------------------------------------------------- #
    # Aaru tuning                                                           #
    # --------------------------------------------------------------------- #
    aaru_debug: bool = False
    aaru_verbose: bool = False
    aaru_force_dumping: bool = True
    aaru_reread_count: int = Field(5, ge=0)

    # --------------------------------------------------------------------- #
    # Preferred speeds, keyed by media type                                 #
    # --------------------------------------------------------------------- #
    preferred_speeds: Dict[MediaType, int] = Field(
        default_factory=lambda: {
            MediaType.CDROM: 24,
            MediaType.DVD: 16,
            MediaType.HDDVD: 24,
            MediaType.BLURAY: 16,
        }
    )

    # --------------------------------------------------------------------- #
    # External collaborators                                                #
    # --------------------------------------------------------------------- #
    catalog_username: Optional[str] = None
    catalog_password: Optional[str] = None
    catalog_base_url: str = "http://redump.org"
    catalog_forum_url: str = "http://forum.redump.org"
    catalog_timeout: float = Field(30.0, gt=0)
    protection_scanner: Optional[str] = None

    @field_validator("aaru_path", "dd_path", "dic_path", "protection_scanner", mode="before")
    @classmethod
    def _blank_is_none(cls, value):
        """Treat empty strings from YAML as unset."""
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def has_catalog_login(self) -> bool:
        return bool(self.catalog_username and self.catalog_password)

    def executable_for(self, backend: BackendKind) -> Optional[str]:
        """Return the configured executable for *backend* (``None`` when not runnable)."""
        return {
            BackendKind.AARU: self.aaru_path,
            BackendKind.DD: self.dd_path,
            BackendKind.DISC_IMAGE_CREATOR: self.dic_path,
        }.get(backend)

    def preferred_speed(self, media_type: MediaType) -> Optional[int]:
        return self.preferred_speeds.get(media_type)
