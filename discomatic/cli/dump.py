"""Dump a disc and write its submission report.

The command is exposed as ``discomatic-cli dump``.  It validates the
configuration, runs the backend, then verifies the outputs and writes
``!submissionInfo.txt`` next to them.  Ctrl-C cancels the backend; no report
is written for a cancelled dump.

Key flags
------------
* ``--parameters``  – use a hand-written argument string instead of the
  generated one.
* ``--no-verify``   – stop after the backend exits.
"""

from __future__ import annotations

import click
import structlog

from discomatic.cli._common import build_request, echo_result, request_options
from discomatic.pipelines import DumpOrchestrator
from discomatic.utils.results import Result, log_progress

log = structlog.get_logger()


def _sink(result: Result) -> None:
    log_progress(result)
    echo_result(result)


@click.command(
    name="dump",
    help="Dump a disc with the selected backend and write the submission report.",
    context_settings=dict(help_option_names=["-h", "--help"], max_content_width=120),
)
@request_options
@click.option("--parameters", "raw_parameters", default=None,
              help="Argument string passed to the backend verbatim.")
@click.option("--no-verify", is_flag=True, help="Skip output verification and report writing.")
@click.pass_obj
def cli(  # noqa: D401 – Click callback naming rule
    ctx_obj,
    raw_parameters: str | None,
    no_verify: bool,
    **request_kwargs,
) -> None:
    """Entry-point for ``discomatic-cli dump``.

    Args:
        ctx_obj:        Click context with global flags already parsed.
        raw_parameters: Optional argument string overriding the generated one.
        no_verify:      Do not gather submission information after the run.
        request_kwargs: Options describing the dump request.
    """
    options = ctx_obj["options"]
    request = build_request(options, **request_kwargs)
    orchestrator = DumpOrchestrator(
        request,
        options,
        progress=_sink,
        parameters=raw_parameters,
    )

    try:
        result = orchestrator.run()
    except KeyboardInterrupt:
        orchestrator.cancel()
        raise click.ClickException("Dump cancelled!")
    if not result:
        raise SystemExit(1)

    if no_verify:
        return
    if not orchestrator.verify_and_save():
        raise SystemExit(1)
