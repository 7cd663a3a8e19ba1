"""Expose the project-wide Click group for the ``discomatic-cli`` script.

The module:

* declares a single Click *group* called :pyfunc:`main`;
* wires common global flags (options file, verbosity, log mirror);
* sets up logging via :pyfunc:`discomatic.utils.logging.setup_logging`;
* loads ``options.yaml`` for every sub-command except ``hash``;
* registers every sub-command located in sibling modules.

No state is mutated outside the Click context, which keeps the CLI layer
side effect free and easy to test.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import click

from discomatic import __version__
from discomatic.config import load_options
from discomatic.utils.errors import ConfigurationError
from discomatic.utils.logging import setup_logging


class LazyGroup(click.Group):
    """Click group that imports sub-commands lazily."""

    def __init__(self, *args, **kwargs):
        """Initialise the base class and prepare the lazy registry."""
        self._lazy: dict[str, str] = {}
        super().__init__(*args, **kwargs)

    def set_lazy_command(self, name: str, target: str) -> None:
        """Register *name* to be imported from ``target`` on first use."""

        self._lazy[name] = target

    def list_commands(self, ctx):
        return sorted(set(super().list_commands(ctx)) | set(self._lazy))

    def get_command(self, ctx, cmd_name):  # noqa: D401 - Click signature
        """Resolve *cmd_name* from the eager map or import table."""
        cmd = super().get_command(ctx, cmd_name)
        if cmd is not None:
            return cmd
        target = self._lazy.get(cmd_name)
        if not target:
            return None
        module_name, attr = target.split(":", 1)
        import importlib

        module = importlib.import_module(module_name)
        cmd = getattr(module, attr)
        self.add_command(cmd, name=cmd_name)
        return cmd


# ─────────────────────────────────────────────────────────────────────────────
# Context settings shared by the entire Click hierarchy
# Show “-h/--help” and provide default values in the automatic help text.
# ─────────────────────────────────────────────────────────────────────────────
_CTX: Dict[str, Any] = dict(
    help_option_names=["-h", "--help"],
    show_default=True,
    max_content_width=120,
)

# ─────────────────────────────────────────────────────────────────────────────
# Top-level Click *group*
# ─────────────────────────────────────────────────────────────────────────────
@click.group(
    cls=LazyGroup,
    context_settings=_CTX,
    help="""\b
discomatic-cli – drive disc dumping tools and write submission reports.

"""
)
@click.version_option(__version__)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Options file (defaults to $DISCOMATIC_CONFIG or ~/.discomatic/options.yaml).",
)
@click.option("-v", "--verbose", is_flag=True, help="INFO-level console output.")
@click.option("--debug",         is_flag=True, help="DEBUG console output.")
@click.option(
    "--save-logfile",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Mirror console output into this plain-text file.",
)
@click.pass_context
def main(  # noqa: D401 – Click requires the callback to be named “main”.
    ctx: click.Context,
    config_path: Path | None,
    verbose: bool,
    debug: bool,
    save_logfile: Path | None,
) -> None:
    """Root command executed by *discomatic-cli*.

    Args:
        ctx: Click runtime context that carries objects across sub-commands.
        config_path: Explicit options file supplied via ``--config``.
        verbose: Emit INFO-level messages on the console.
        debug: Emit DEBUG-level messages.
        save_logfile: Optional path for a plain-text log that mirrors console
            output.

    Raises:
        click.ClickException: When the options file is missing or invalid.
    """
    subcmd = ctx.invoked_subcommand or ""

    # Logging must be configured before any output is produced ----------------
    setup_logging(verbose=verbose, debug=debug, extra_text_log=save_logfile)

    options = None
    if subcmd != "hash":
        try:
            options = load_options(config_path)
        except ConfigurationError as exc:
            raise click.ClickException(str(exc)) from exc

    ctx.obj = {
        "options": options,
        "verbose": verbose,
        "debug":   debug,
    }

main.set_lazy_command("params", "discomatic.cli.params:cli")
main.set_lazy_command("dump", "discomatic.cli.dump:cli")
main.set_lazy_command("verify", "discomatic.cli.verify:cli")
main.set_lazy_command("hash", "discomatic.cli.hash:cli")

# The public symbol exported by this module.  Required for ``python -m`` entry-points.
cli = main
__all__: list[str] = ["main"]
