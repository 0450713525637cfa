"""CLI application for Azure NetApp Files provisioning."""

import typer

from anfops.cli.commands.demo import app as demo_app
from anfops.cli.commands.resources import app as resource_app
from anfops.cli.common.exits import warn_exit
from anfops.cli.common.logs import configure_logging
from anfops.cli.common.options import VerboseOpt
from anfops.cli.common.output import out
from anfops.core.uri import ResourceKind, classify, parse_resource_id

app = typer.Typer(
    help="anfops - Azure NetApp Files provisioning",
    no_args_is_help=True,
)


@app.callback()
def _main(verbose: bool = VerboseOpt):
    """Configure logging for every command."""
    configure_logging(verbose)


@app.command()
def parse(
    resource_id: str = typer.Argument(..., help="ARM resource id to inspect"),
):
    """
    Show the names encoded in a resource id and the ANF kind it refers to.
    """
    kind = classify(resource_id)
    out.header("Resource id")
    out.kv({"kind": kind.value})
    out.kv({k: v or "-" for k, v in parse_resource_id(resource_id).items()})
    if kind is ResourceKind.UNKNOWN:
        warn_exit("Not a recognised ANF resource id", code=1)


app.add_typer(demo_app, name="demo", help="Build / tear down the demo topology.")
app.add_typer(resource_app, name="resource", help="Wait for or delete a resource.")


if __name__ == "__main__":
    app()
