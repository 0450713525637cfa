"""Application context management for the CLI."""

from dataclasses import dataclass
from pathlib import Path

from anfops.cli.common.exits import exit_from_exc
from anfops.core.adapters.netapp import NetAppAdapter
from anfops.core.auth import ClientFactory, get_client_factory
from anfops.core.errors import AuthError, ConfigError


@dataclass
class AppContext:
    """Application context holding the client factory and NetApp adapter."""

    auth_file: Path | None
    factory: ClientFactory
    adapter: NetAppAdapter


def build_context(auth_file: Path | None) -> AppContext:
    """Build and return the application context.

    Args:
        auth_file: Optional path to the Azure basic-info JSON file.

    Returns:
        AppContext: Application context with configured factory and adapter.
    """
    try:
        factory = get_client_factory(auth_file)
    except (ConfigError, AuthError) as exc:
        exit_from_exc(exc)
    return AppContext(
        auth_file=auth_file, factory=factory, adapter=NetAppAdapter(factory)
    )
