"""Print the argument string discomatic would pass to the dumping program.

The command is exposed as ``discomatic-cli params`` and never touches the
drive; it is handy for checking a configuration before a long dump.
"""

from __future__ import annotations

import click
import structlog

from discomatic.cli._common import build_request, request_options
from discomatic.pipelines import DumpOrchestrator

log = structlog.get_logger()


@click.command(
    name="params",
    help="Show the generated command line for a dump without running it.",
    context_settings=dict(help_option_names=["-h", "--help"], max_content_width=120),
)
@request_options
@click.pass_obj
def cli(ctx_obj, **request_kwargs) -> None:  # noqa: D401 – Click callback naming rule
    """Entry-point for ``discomatic-cli params``."""
    options = ctx_obj["options"]
    request = build_request(options, **request_kwargs)
    orchestrator = DumpOrchestrator(request, options)

    if not orchestrator.parameters_valid():
        raise click.ClickException("Current configuration is not supported")

    arguments = orchestrator.parameters.generate()
    log.debug("cli.params", backend=request.backend.value, arguments=arguments)
    executable = orchestrator.parameters.executable_path
    click.echo(f"{executable} {arguments}" if executable else arguments)
