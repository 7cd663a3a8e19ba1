"""Wrappers for external dump tools.

:data:`PARAMETER_TYPES` maps every :class:`~discomatic.models.BackendKind` to
the :class:`BackendParameters` subclass that understands its command line and
log files.
"""

from __future__ import annotations

from typing import Dict, Optional, Type

from discomatic.config.schema import Options
from discomatic.models import BackendKind, DiscSystem, Drive, MediaType

from .aaru import AaruParameters
from .base import BackendParameters, OutputFile, Tool, ToolSpec, VerificationOnlyParameters
from .cleanrip import CleanRipParameters
from .dcdumper import DCDumperParameters
from .dd import DDParameters
from .discimagecreator import DiscImageCreatorParameters, extension_for
from .umdimagecreator import UmdImageCreatorParameters

PARAMETER_TYPES: Dict[BackendKind, Type[BackendParameters]] = {
    BackendKind.AARU: AaruParameters,
    BackendKind.DD: DDParameters,
    BackendKind.DISC_IMAGE_CREATOR: DiscImageCreatorParameters,
    BackendKind.CLEANRIP: CleanRipParameters,
    BackendKind.UMD_IMAGE_CREATOR: UmdImageCreatorParameters,
    BackendKind.DCDUMPER: DCDumperParameters,
}


def parameters_class(kind: BackendKind) -> Type[BackendParameters]:
    """Return the parameter class registered for *kind*."""
    return PARAMETER_TYPES[kind]


def create_parameters(
    kind: BackendKind,
    argument_string: str | None,
    executable_path: str | None = None,
    system: DiscSystem | None = None,
    media_type: MediaType | None = None,
) -> BackendParameters:
    """Parse *argument_string* with the parameter class of *kind*."""
    return parameters_class(kind)(
        argument_string,
        system=system,
        media_type=media_type,
        executable_path=executable_path,
    )


def build_parameters(
    kind: BackendKind,
    system: DiscSystem | None,
    media_type: MediaType | None,
    drive: Drive | None,
    filename: str,
    speed: Optional[int],
    options: Options,
) -> BackendParameters:
    """Build fresh dump parameters for the selection."""
    return parameters_class(kind).build(system, media_type, drive, filename, speed, options)


__all__ = [
    "PARAMETER_TYPES",
    "parameters_class",
    "create_parameters",
    "build_parameters",
    "extension_for",
    "BackendParameters",
    "VerificationOnlyParameters",
    "OutputFile",
    "Tool",
    "ToolSpec",
    "AaruParameters",
    "CleanRipParameters",
    "DCDumperParameters",
    "DDParameters",
    "DiscImageCreatorParameters",
    "UmdImageCreatorParameters",
]
