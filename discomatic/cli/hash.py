"""Print size and digests of a file, in the form used by DAT lines."""

from __future__ import annotations

from pathlib import Path

import click

from discomatic.utils.dat import format_dat_line
from discomatic.utils.hashing import Hash, hash_file


@click.command(
    name="hash",
    help="Compute size, CRC32, MD5 and SHA-1 of a file.",
    context_settings=dict(help_option_names=["-h", "--help"], max_content_width=120),
)
@click.argument("path", type=click.Path(path_type=Path, exists=True, dir_okay=False))
@click.option("--all", "all_hashes", is_flag=True, help="Also compute SHA-256/384/512.")
@click.option("--dat", is_flag=True, help="Print a ClrMamePro DAT line instead.")
def cli(path: Path, all_hashes: bool, dat: bool) -> None:  # noqa: D401
    """Entry-point for ``discomatic-cli hash``."""
    hashes = hash_file(path, Hash.ALL if all_hashes else Hash.STANDARD)
    if hashes is None:
        raise click.ClickException(f"Could not read {path}")

    if dat:
        click.echo(format_dat_line(path.name, hashes.size, hashes.crc32, hashes.md5, hashes.sha1))
        return

    click.echo(f"Size: {hashes.size}")
    for hash_type, digest in hashes.digests.items():
        click.echo(f"{hash_type.name}: {digest}")
