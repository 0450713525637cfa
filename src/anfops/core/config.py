"""Loading of the Azure basic-info (auth) JSON file and env-driven defaults.

The file follows the layout produced by ``az ad sp create-for-rbac --sdk-auth``
(camelCase keys). Only ``subscriptionId`` is required; without service
principal fields the ambient Azure credential chain is used instead.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from anfops.core.errors import ConfigError

AUTH_FILE_ENV = "ANFOPS_AUTH_FILE"
POLL_INTERVAL_ENV = "ANFOPS_POLL_INTERVAL"
POLL_RETRIES_ENV = "ANFOPS_POLL_RETRIES"

DEFAULT_AUTH_FILE = "azureauth.json"
DEFAULT_POLL_INTERVAL_SECONDS = 10
DEFAULT_POLL_RETRIES = 60


@dataclass(frozen=True)
class AzureBasicInfo:
    """
    Subscription and (optional) service principal details.

    Attributes:
        subscription_id: Subscription all clients are bound to.
        tenant_id: Entra ID tenant of the service principal.
        client_id: Application (client) id of the service principal.
        client_secret: Secret of the service principal.
    """

    subscription_id: str
    tenant_id: str | None = None
    client_id: str | None = None
    client_secret: str | None = None

    @property
    def has_service_principal(self) -> bool:
        """Return True when all three service principal fields are set."""
        return bool(self.tenant_id and self.client_id and self.client_secret)


def resolve_auth_file(path: str | Path | None = None) -> Path:
    """Return the auth file path from the argument, env var, or default name."""
    if path:
        return Path(path)
    return Path(os.getenv(AUTH_FILE_ENV) or DEFAULT_AUTH_FILE)


def load_basic_info(path: str | Path | None = None) -> AzureBasicInfo:
    """Read and validate the auth JSON file."""
    file_path = resolve_auth_file(path)
    try:
        payload = json.loads(file_path.read_text())
    except OSError as exc:
        raise ConfigError(f"failed to read file {file_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in {file_path}: {exc}") from exc

    if not isinstance(payload, dict):
        raise ConfigError(f"{file_path} must contain a JSON object")

    subscription_id = str(payload.get("subscriptionId") or "").strip()
    if not subscription_id:
        raise ConfigError(f"{file_path} is missing 'subscriptionId'")

    return AzureBasicInfo(
        subscription_id=subscription_id,
        tenant_id=payload.get("tenantId") or None,
        client_id=payload.get("clientId") or None,
        client_secret=payload.get("clientSecret") or None,
    )


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return max(int(raw), 0)
    except ValueError:
        return default


def poll_interval_seconds() -> int:
    """Return the poll interval in seconds, honoring env override."""
    return _int_from_env(POLL_INTERVAL_ENV, DEFAULT_POLL_INTERVAL_SECONDS)


def poll_retries() -> int:
    """Return the poll retry budget, honoring env override."""
    return _int_from_env(POLL_RETRIES_ENV, DEFAULT_POLL_RETRIES)
