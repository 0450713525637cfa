"""Commands that act on a single ANF resource id."""

from pathlib import Path

import typer
from azure.core.exceptions import AzureError

from anfops.cli.common.context import AppContext, build_context
from anfops.cli.common.exits import die, exit_from_exc, ok_exit, warn_exit
from anfops.cli.common.options import (
    AuthFileOpt,
    ConfirmOpt,
    IntervalOpt,
    ReplicationOpt,
    RetriesOpt,
    WaitOpt,
    resolve_path,
)
from anfops.cli.common.output import out
from anfops.cli.common.progress import poll_with_progress
from anfops.core.config import poll_interval_seconds, poll_retries
from anfops.core.errors import AnfError, ConvergenceTimeoutError
from anfops.core.poller import PollMode, PollRequest, raise_for_result
from anfops.core.provisioning import delete_resource
from anfops.core.uri import ResourceKind, classify

app = typer.Typer(
    help="Wait for or delete an ANF resource by id.",
    no_args_is_help=False,
    invoke_without_command=True,
)

ResourceIdArg = typer.Argument(..., help="Full ARM resource id of the ANF resource")


@app.callback()
def _init(ctx: typer.Context, auth_file: Path | None = AuthFileOpt):
    """Initialize resource context."""
    ctx.obj = build_context(resolve_path(auth_file))
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


def _kind_or_exit(resource_id: str) -> ResourceKind:
    """Classify the id and turn unrecognised ids into CLI input errors."""
    kind = classify(resource_id)
    if kind is ResourceKind.UNKNOWN:
        die(f"Not a recognised ANF resource id: {resource_id}", code=2)
    return kind


def _wait(appctx: AppContext, request: PollRequest) -> None:
    """Poll with progress and exit non-zero unless the poll converged."""
    result = poll_with_progress(appctx.adapter, request)
    try:
        raise_for_result(request, result)
    except ConvergenceTimeoutError as exc:
        exit_from_exc(exc)


@app.command()
def wait(
    ctx: typer.Context,
    resource_id: str = ResourceIdArg,
    absent: bool = typer.Option(
        False,
        "--absent/--present",
        help="Wait until the resource is gone (--absent) or readable (--present)",
    ),
    interval: int | None = IntervalOpt,
    retries: int | None = RetriesOpt,
    replication: bool = ReplicationOpt,
):
    """
    Poll a resource until it is readable or gone.
    """
    appctx: AppContext = ctx.obj
    kind = _kind_or_exit(resource_id)

    request = PollRequest(
        path=resource_id,
        interval_seconds=interval if interval is not None else poll_interval_seconds(),
        max_retries=retries if retries is not None else poll_retries(),
        mode=PollMode.AWAIT_ABSENCE if absent else PollMode.AWAIT_PRESENCE,
        check_replication_status=replication,
    )
    _wait(appctx, request)
    ok_exit(f"{kind.value} is {'gone' if absent else 'ready'}")


@app.command()
def delete(
    ctx: typer.Context,
    resource_id: str = ResourceIdArg,
    wait_gone: bool = WaitOpt,
    confirm: bool = ConfirmOpt,
    interval: int | None = IntervalOpt,
    retries: int | None = RetriesOpt,
):
    """
    Delete a resource (account, pool, volume, snapshot or snapshot policy).
    """
    appctx: AppContext = ctx.obj
    kind = _kind_or_exit(resource_id)

    out.resources_table([resource_id], title="To delete")
    if confirm and not out.confirm(f"Delete this {kind.value}?"):
        warn_exit("Cancelled", code=0)

    try:
        with out.status(f"Deleting {kind.value}..."):
            delete_resource(appctx.adapter, resource_id)
    except (AnfError, AzureError) as exc:
        exit_from_exc(exc)

    out.success(f"{kind.value} deleted")
    if not wait_gone:
        ok_exit()

    _wait(
        appctx,
        PollRequest(
            path=resource_id,
            interval_seconds=interval if interval is not None else poll_interval_seconds(),
            max_retries=retries if retries is not None else poll_retries(),
            mode=PollMode.AWAIT_ABSENCE,
        ),
    )
    ok_exit(f"{kind.value} is gone")
