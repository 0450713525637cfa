"""Common CLI options for the CLI."""

from pathlib import Path

import typer

AuthFileOpt = typer.Option(
    None,
    "--auth-file",
    "-a",
    help="Azure basic-info JSON file (default: $ANFOPS_AUTH_FILE or ./azureauth.json)",
)

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Log SDK calls and poll attempts",
)

IntervalOpt = typer.Option(
    None,
    "--interval",
    help="Seconds between poll attempts (default: $ANFOPS_POLL_INTERVAL or 10)",
    min=0,
)

RetriesOpt = typer.Option(
    None,
    "--retries",
    help="Maximum poll attempts (default: $ANFOPS_POLL_RETRIES or 60)",
    min=1,
)

ConfirmOpt = typer.Option(
    True,
    "--confirm/--no-confirm",
    help="Ask for confirmation before deleting anything",
)

CleanupOpt = typer.Option(
    False,
    "--cleanup",
    help="Delete every demo resource once the demo has finished",
)

WaitOpt = typer.Option(
    True,
    "--wait/--no-wait",
    help="Wait until the deleted resource is no longer readable",
)

ReplicationOpt = typer.Option(
    False,
    "--replication",
    help="For volumes, poll the replication status instead of the volume",
)


def resolve_path(value: Path | None) -> Path | None:
    """Expand ~ in an optional path option."""
    return value.expanduser() if value else None
