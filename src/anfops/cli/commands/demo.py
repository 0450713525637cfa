"""Command that builds (and optionally tears down) the demo ANF topology."""

from pathlib import Path

import typer
from azure.core.exceptions import AzureError

from anfops.cli.common.context import AppContext, build_context
from anfops.cli.common.exits import exit_from_exc, ok_exit
from anfops.cli.common.options import (
    AuthFileOpt,
    CleanupOpt,
    ConfirmOpt,
    IntervalOpt,
    RetriesOpt,
    resolve_path,
)
from anfops.cli.common.output import out
from anfops.core.adapters.netapp import validate_service_level
from anfops.core.config import poll_interval_seconds, poll_retries
from anfops.core.errors import AnfError, ValidationError
from anfops.core.provisioning import (
    DemoSettings,
    Topology,
    provision_topology,
    teardown_topology,
)

app = typer.Typer(
    help="Build the demo topology: account, pool, volumes, snapshot, clone, resize.",
    no_args_is_help=False,
    invoke_without_command=True,
)


@app.callback()
def _init(ctx: typer.Context, auth_file: Path | None = AuthFileOpt):
    """Initialize demo context."""
    ctx.obj = build_context(resolve_path(auth_file))
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


@app.command()
def run(
    ctx: typer.Context,
    resource_group: str = typer.Option(
        ..., "--resource-group", "-g", help="Existing resource group"
    ),
    subnet_id: str = typer.Option(
        ..., "--subnet-id", help="Subnet delegated to Microsoft.NetApp/volumes"
    ),
    location: str = typer.Option("eastus", "--location", "-l", help="Azure region"),
    account: str = typer.Option("anf01", "--account", help="NetApp account name"),
    pool: str = typer.Option("pool01", "--pool", help="Capacity pool name"),
    service_level: str = typer.Option(
        "Premium", "--service-level", help="Ultra, Premium or Standard"
    ),
    pool_size: int = typer.Option(4, "--pool-size", help="Pool size in TiB", min=1),
    volume_size: int = typer.Option(
        100, "--volume-size", help="Initial volume quota in GiB", min=1
    ),
    new_volume_size: int = typer.Option(
        200, "--new-volume-size", help="Quota of the NFSv4.1 volume after resize (GiB)"
    ),
    interval: int | None = IntervalOpt,
    retries: int | None = RetriesOpt,
    cleanup: bool = CleanupOpt,
    confirm: bool = ConfirmOpt,
):
    """
    Create the demo topology, then delete it when --cleanup is given.
    """
    appctx: AppContext = ctx.obj

    try:
        validate_service_level(service_level)
    except ValidationError as exc:
        exit_from_exc(exc)

    settings = DemoSettings(
        location=location,
        resource_group=resource_group,
        subnet_id=subnet_id,
        account_name=account,
        pool_name=pool,
        service_level=service_level,
        pool_size_tib=pool_size,
        volume_size_gib=volume_size,
        resized_volume_size_gib=new_volume_size,
        interval_seconds=interval if interval is not None else poll_interval_seconds(),
        max_retries=retries if retries is not None else poll_retries(),
    )

    out.header("Azure NetApp Files demo")
    out.kv(
        {
            "Location": settings.location,
            "Resource group": settings.resource_group,
            "Account / pool": f"{settings.account_name} / {settings.pool_name}",
            "Service level": settings.service_level,
        }
    )

    topology = Topology()
    try:
        with out.status("Provisioning demo topology..."):
            provision_topology(
                appctx.adapter, settings, report=out.info, topology=topology
            )
    except (AnfError, AzureError) as exc:
        if topology.resource_ids:
            out.resources_table(topology.resource_ids, title="Created before failure")
        exit_from_exc(exc, message=f"Demo failed: {exc}")

    out.success(f"Demo topology ready: {len(topology.resource_ids)} resource(s)")
    out.resources_table(topology.resource_ids, title="Created resources")

    if not cleanup:
        ok_exit("Cleanup skipped (pass --cleanup to delete the demo resources)")

    if confirm and not out.confirm("Delete all demo resources?"):
        ok_exit("Cancelled")

    try:
        with out.status("Deleting demo resources..."):
            deleted = teardown_topology(
                appctx.adapter,
                topology,
                interval_seconds=settings.interval_seconds,
                max_retries=settings.max_retries,
                report=out.info,
            )
    except (AnfError, AzureError) as exc:
        exit_from_exc(exc, message=f"Cleanup failed: {exc}")

    out.success(f"Deleted {len(deleted)} resource(s)")
