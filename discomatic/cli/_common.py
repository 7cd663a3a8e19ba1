"""Option decorators and request helpers shared by the dump-related commands."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import click
from pydantic import ValidationError

from discomatic.config.schema import Options
from discomatic.models import BackendKind, DiscSystem, Drive, DriveKind, DumpRequest, MediaType

# ---------------------------------------------------------------------------
# Choice converters
# ---------------------------------------------------------------------------
def _vocabulary(enum_cls, label: str) -> Callable:
    """Return a Click callback that maps text onto a member of *enum_cls*."""

    def _convert(ctx, param, value):
        if value is None:
            return None
        member = enum_cls.from_text(value)
        if member is None:
            raise click.BadParameter(f"unknown {label}: {value}")
        return member

    return _convert


def _backend(ctx, param, value) -> Optional[BackendKind]:
    if value is None:
        return None
    for kind in BackendKind:
        if value.strip().lower() in {kind.value.lower(), kind.name.lower()}:
            return kind
    raise click.BadParameter(f"unknown backend: {value}")


# ---------------------------------------------------------------------------
# Shared option block
# ---------------------------------------------------------------------------
def request_options(func: Callable) -> Callable:
    """Attach the options that describe a :class:`DumpRequest`."""
    decorators = [
        click.option("-s", "--system", required=True, callback=_vocabulary(DiscSystem, "system"),
                     help="Disc system (short code such as 'psx' or its full name)."),
        click.option("-m", "--media", "media_type", required=True,
                     callback=_vocabulary(MediaType, "media type"),
                     help="Media type (for example CDROM, DVD, BluRay)."),
        click.option("-d", "--drive", default=None, help="Drive letter or device path."),
        click.option("--drive-kind", type=click.Choice([k.value for k in DriveKind]),
                     default=DriveKind.OPTICAL.value),
        click.option("--mount", "mount_path", type=click.Path(file_okay=False, path_type=Path),
                     default=None, help="Where the inserted media's filesystem is readable."),
        click.option("-o", "--output-dir", required=True,
                     type=click.Path(file_okay=False, path_type=Path)),
        click.option("-f", "--filename", required=True, help="Output filename."),
        click.option("-b", "--backend", callback=_backend, default=None,
                     help="Dumping program (defaults to the configured backend)."),
        click.option("--speed", type=int, default=None, help="Drive speed override."),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def build_request(
    options: Options,
    *,
    system: DiscSystem,
    media_type: MediaType,
    drive: Optional[str],
    drive_kind: str,
    mount_path: Optional[Path],
    output_dir: Path,
    filename: str,
    backend: Optional[BackendKind],
    speed: Optional[int],
) -> DumpRequest:
    """Assemble a :class:`DumpRequest` or raise :class:`click.UsageError`."""
    drive_obj = (
        Drive(name=drive, kind=DriveKind(drive_kind), mount_path=mount_path)
        if drive
        else None
    )
    try:
        return DumpRequest(
            output_directory=str(output_dir),
            output_filename=filename,
            drive=drive_obj,
            system=system,
            media_type=media_type,
            backend=backend or options.backend,
            drive_speed=speed,
        )
    except ValidationError as exc:
        messages = "; ".join(err["msg"] for err in exc.errors())
        raise click.UsageError(messages) from exc


def echo_result(result) -> None:
    """Print one progress :class:`Result` to the terminal."""
    click.echo(result.message, err=not result.success)
