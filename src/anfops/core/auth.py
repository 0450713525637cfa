"""Authentication helpers for Azure.

This module turns the basic-info file into an Azure credential and exposes a
small factory that hands out management clients bound to that credential and
subscription. Clients are built on demand so every operation gets its own
handle.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from azure.core.credentials import TokenCredential
from azure.core.exceptions import ClientAuthenticationError
from azure.identity import ClientSecretCredential, DefaultAzureCredential
from azure.mgmt.netapp import NetAppManagementClient
from azure.mgmt.resource import ResourceManagementClient

from anfops.core.config import AzureBasicInfo, load_basic_info
from anfops.core.errors import AuthError

USER_AGENT = "anfops-cli"


def _format_auth_error(message: str, info: AzureBasicInfo) -> str:
    """Return a user-friendly auth error message."""
    if info.has_service_principal:
        return (
            f"Azure authentication failed for service principal {info.client_id}: "
            f"{message}"
        )
    return (
        "Azure authentication failed. Sign in with:\n"
        "  $ az login\n"
        f"or add service principal fields to the auth file. ({message})"
    )


def get_credential(info: AzureBasicInfo) -> TokenCredential:
    """
    Create the credential described by the basic-info file.

    A service principal (tenant, client id, secret) yields a
    ClientSecretCredential; otherwise the DefaultAzureCredential chain
    (environment, managed identity, Azure CLI, ...) is used.
    """
    try:
        if info.has_service_principal:
            return ClientSecretCredential(
                tenant_id=str(info.tenant_id),
                client_id=str(info.client_id),
                client_secret=str(info.client_secret),
            )
        return DefaultAzureCredential()
    except (ValueError, ClientAuthenticationError) as exc:
        raise AuthError(_format_auth_error(str(exc), info)) from exc


@dataclass(frozen=True)
class ClientFactory:
    """Produces management clients for one credential and subscription."""

    credential: TokenCredential
    subscription_id: str

    def netapp(self) -> NetAppManagementClient:
        """Return a new NetApp management client."""
        return NetAppManagementClient(
            self.credential, self.subscription_id, user_agent=USER_AGENT
        )

    def resources(self) -> ResourceManagementClient:
        """Return a new generic ARM resources client."""
        return ResourceManagementClient(
            self.credential, self.subscription_id, user_agent=USER_AGENT
        )


def get_client_factory(auth_file: str | Path | None = None) -> ClientFactory:
    """Load the basic-info file and return a configured ClientFactory."""
    info = load_basic_info(auth_file)
    return ClientFactory(
        credential=get_credential(info), subscription_id=info.subscription_id
    )
