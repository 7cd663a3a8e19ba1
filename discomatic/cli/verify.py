"""Re-verify an existing dump and (re)write its submission report.

Works for every backend, including the ones discomatic never runs itself
(CleanRip, UmdImageCreator, DCDumper).  Dumping backends need either a drive
or the original ``--parameters`` string so the expected output files are
known.
"""

from __future__ import annotations

import click
import structlog

from discomatic.cli._common import build_request, echo_result, request_options
from discomatic.pipelines import DumpOrchestrator
from discomatic.utils.paths import base_path
from discomatic.utils.results import Result, log_progress

log = structlog.get_logger()


def _sink(result: Result) -> None:
    log_progress(result)
    echo_result(result)


@click.command(
    name="verify",
    help="Check the outputs of a finished dump and write the submission report.",
    context_settings=dict(help_option_names=["-h", "--help"], max_content_width=120),
)
@request_options
@click.option("--parameters", "raw_parameters", default=None,
              help="Argument string the dump was made with.")
@click.pass_obj
def cli(ctx_obj, raw_parameters: str | None, **request_kwargs) -> None:  # noqa: D401
    """Entry-point for ``discomatic-cli verify``."""
    options = ctx_obj["options"]
    request = build_request(options, **request_kwargs)

    if request.backend.supports_dumping and request.drive is None and raw_parameters is None:
        raise click.UsageError(
            f"{request.backend.value} output needs --drive or --parameters to be verified"
        )

    orchestrator = DumpOrchestrator(
        request,
        options,
        progress=_sink,
        parameters=raw_parameters,
    )

    base = base_path(orchestrator.output_directory, orchestrator.output_filename)
    found, missing = orchestrator.parameters.check_outputs_exist(base, pre_check=True)
    if not found:
        log.warning("cli.verify_missing", missing=missing)
        raise click.ClickException(
            "Output does not look like a finished dump; missing:\n" + "\n".join(missing)
        )

    if not orchestrator.verify_and_save():
        raise SystemExit(1)
