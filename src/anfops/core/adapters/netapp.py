from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Protocol, Sequence

from azure.core.exceptions import AzureError
from azure.core.polling import LROPoller
from azure.mgmt.netapp import NetAppManagementClient
from azure.mgmt.netapp.models import (
    ActiveDirectory,
    AuthorizeRequest,
    CapacityPool,
    ExportPolicyRule,
    NetAppAccount,
    ReplicationStatus,
    ServiceLevel,
    Snapshot,
    SnapshotPolicy,
    SnapshotPolicyPatch,
    Volume,
    VolumePatch,
    VolumePropertiesDataProtection,
    VolumePropertiesExportPolicy,
)
from azure.mgmt.resource import ResourceManagementClient

from anfops.core.errors import CompletionError, SubmissionError, ValidationError
from anfops.core.uri import (
    get_resource_group,
    get_resource_name,
    get_resource_value,
)

logger = logging.getLogger(__name__)

NFSV3 = "NFSv3"
NFSV41 = "NFSv4.1"
CIFS = "CIFS"
VALID_PROTOCOLS = (NFSV3, NFSV41, CIFS)

_SERVICE_LEVELS = {
    "ultra": ServiceLevel.ULTRA,
    "premium": ServiceLevel.PREMIUM,
    "standard": ServiceLevel.STANDARD,
}
VALID_SERVICE_LEVELS = ("Ultra", "Premium", "Standard")

_DUAL_PROTOCOL = frozenset({NFSV3, CIFS})


class ClientFactoryLike(Protocol):
    """Anything that hands out management clients (see anfops.core.auth.ClientFactory)."""

    def netapp(self) -> NetAppManagementClient:
        ...

    def resources(self) -> ResourceManagementClient:
        ...


def validate_service_level(service_level: str) -> ServiceLevel:
    """Map a case-insensitive service level name onto the SDK enum."""
    level = _SERVICE_LEVELS.get((service_level or "").strip().lower())
    if level is None:
        raise ValidationError(
            "invalid service level, supported service levels are: "
            f"{', '.join(VALID_SERVICE_LEVELS)}"
        )
    return level


def validate_protocol_types(protocol_types: Sequence[str]) -> list[str]:
    """
    Check a volume's protocol list.

    At most two protocols are allowed and a pair must be NFSv3 + CIFS without
    repeats. The first (primary) protocol must be one of VALID_PROTOCOLS.
    """
    protocols = list(protocol_types)
    if len(protocols) > 2:
        raise ValidationError("maximum of two protocol types are supported")
    if len(protocols) == 2 and protocols[0] == protocols[1]:
        raise ValidationError(f"duplicate protocol type: {protocols[0]}")
    if len(protocols) == 2 and set(protocols) != _DUAL_PROTOCOL:
        raise ValidationError(
            "only cifs/nfsv3 protocol types are supported as dual protocol"
        )
    if not protocols or protocols[0] not in VALID_PROTOCOLS:
        raise ValidationError(
            "invalid protocol type, valid protocol types are: "
            f"{', '.join(VALID_PROTOCOLS)}"
        )
    return protocols


def build_export_policy(
    primary_protocol: str, *, unix_read_only: bool, unix_read_write: bool
) -> VolumePropertiesExportPolicy | None:
    """Return the default allow-all export policy, or None for CIFS volumes."""
    if primary_protocol == CIFS:
        return None
    rule = ExportPolicyRule(
        rule_index=1,
        allowed_clients="0.0.0.0/0",
        cifs=False,
        nfsv3=primary_protocol == NFSV3,
        nfsv41=primary_protocol == NFSV41,
        unix_read_only=unix_read_only,
        unix_read_write=unix_read_write,
    )
    return VolumePropertiesExportPolicy(rules=[rule])


class NetAppAdapter:
    """Adapter around the Azure NetApp Files management SDK."""

    def __init__(self, factory: ClientFactoryLike) -> None:
        self.factory = factory

    def _run(self, operation: str, submit: Callable[[], LROPoller]) -> Any:
        """Submit a long-running operation and block until it finishes."""
        logger.debug("Submitting: %s", operation)
        try:
            poller = submit()
        except AzureError as exc:
            raise SubmissionError(operation, exc) from exc
        try:
            result = poller.result()
        except AzureError as exc:
            raise CompletionError(operation, exc) from exc
        logger.debug("Completed: %s", operation)
        return result

    # -- generic -----------------------------------------------------------

    def get_resource_by_id(self, resource_id: str, api_version: str) -> Any:
        """
        Look up any ARM resource by id.

        Subnets are nested under their virtual network, so for subnet ids the
        parent path becomes ``virtualNetworks/{vnet}`` and the type ``subnets``.
        """
        resource_group = get_resource_group(resource_id)
        provider = get_resource_value(resource_id, "providers")
        resource_name = get_resource_name(resource_id)
        resource_type = get_resource_value(resource_id, provider)
        parent = ""

        if "/subnets/" in resource_id:
            parent_name = get_resource_value(resource_id, resource_type)
            parent = f"{resource_type}/{parent_name}"
            resource_type = "subnets"

        return self.factory.resources().resources.get(
            resource_group,
            provider,
            parent,
            resource_type,
            resource_name,
            api_version,
        )

    # -- accounts ----------------------------------------------------------

    def create_account(
        self,
        location: str,
        resource_group: str,
        account: str,
        active_directories: list[ActiveDirectory] | None = None,
        tags: Mapping[str, str] | None = None,
    ) -> NetAppAccount:
        """Create (or update) a NetApp account."""
        body = NetAppAccount(
            location=location,
            tags=dict(tags) if tags else None,
            active_directories=active_directories,
        )
        accounts = self.factory.netapp().accounts
        return self._run(
            "create account",
            lambda: accounts.begin_create_or_update(resource_group, account, body),
        )

    def get_account(self, resource_group: str, account: str) -> NetAppAccount:
        return self.factory.netapp().accounts.get(resource_group, account)

    def delete_account(self, resource_group: str, account: str) -> None:
        accounts = self.factory.netapp().accounts
        self._run(
            "delete account",
            lambda: accounts.begin_delete(resource_group, account),
        )

    # -- capacity pools ----------------------------------------------------

    def create_capacity_pool(
        self,
        location: str,
        resource_group: str,
        account: str,
        pool: str,
        service_level: str,
        size_bytes: int,
        tags: Mapping[str, str] | None = None,
    ) -> CapacityPool:
        """Create (or update) a capacity pool within an account."""
        level = validate_service_level(service_level)
        body = CapacityPool(
            location=location,
            tags=dict(tags) if tags else None,
            service_level=level,
            size=size_bytes,
        )
        pools = self.factory.netapp().pools
        return self._run(
            "create pool",
            lambda: pools.begin_create_or_update(resource_group, account, pool, body),
        )

    def get_capacity_pool(
        self, resource_group: str, account: str, pool: str
    ) -> CapacityPool:
        return self.factory.netapp().pools.get(resource_group, account, pool)

    def delete_capacity_pool(self, resource_group: str, account: str, pool: str) -> None:
        pools = self.factory.netapp().pools
        self._run(
            "delete capacity pool",
            lambda: pools.begin_delete(resource_group, account, pool),
        )

    # -- volumes -----------------------------------------------------------

    def create_volume(
        self,
        location: str,
        resource_group: str,
        account: str,
        pool: str,
        volume: str,
        service_level: str,
        subnet_id: str,
        protocol_types: Sequence[str],
        usage_threshold_bytes: int,
        unix_read_only: bool = False,
        unix_read_write: bool = True,
        snapshot_id: str = "",
        tags: Mapping[str, str] | None = None,
        data_protection: VolumePropertiesDataProtection | None = None,
    ) -> Volume:
        """
        Create (or update) a volume within a capacity pool.

        Protocols and service level are validated before anything is sent.
        Non-CIFS volumes get a single allow-all export rule. A non-empty
        snapshot_id creates the volume from that snapshot.
        """
        protocols = validate_protocol_types(protocol_types)
        level = validate_service_level(service_level)

        body = Volume(
            location=location,
            tags=dict(tags) if tags else None,
            creation_token=volume,
            service_level=level,
            subnet_id=subnet_id,
            usage_threshold=usage_threshold_bytes,
            protocol_types=protocols,
            export_policy=build_export_policy(
                protocols[0],
                unix_read_only=unix_read_only,
                unix_read_write=unix_read_write,
            ),
            snapshot_id=snapshot_id or None,
            data_protection=data_protection,
        )
        volumes = self.factory.netapp().volumes
        return self._run(
            "create volume",
            lambda: volumes.begin_create_or_update(
                resource_group, account, pool, volume, body
            ),
        )

    def update_volume(
        self,
        location: str,
        resource_group: str,
        account: str,
        pool: str,
        volume: str,
        properties: Mapping[str, Any],
        tags: Mapping[str, str] | None = None,
    ) -> Volume:
        """Patch a volume; `properties` are VolumePatch keyword arguments."""
        body = VolumePatch(
            location=location, tags=dict(tags) if tags else None, **properties
        )
        volumes = self.factory.netapp().volumes
        return self._run(
            "update volume",
            lambda: volumes.begin_update(resource_group, account, pool, volume, body),
        )

    def resize_volume(
        self,
        location: str,
        resource_group: str,
        account: str,
        pool: str,
        volume: str,
        usage_threshold_bytes: int,
    ) -> Volume:
        """Change a volume's quota."""
        return self.update_volume(
            location,
            resource_group,
            account,
            pool,
            volume,
            {"usage_threshold": usage_threshold_bytes},
        )

    def get_volume(
        self, resource_group: str, account: str, pool: str, volume: str
    ) -> Volume:
        return self.factory.netapp().volumes.get(resource_group, account, pool, volume)

    def get_volume_replication_status(
        self, resource_group: str, account: str, pool: str, volume: str
    ) -> ReplicationStatus:
        return self.factory.netapp().volumes.replication_status(
            resource_group, account, pool, volume
        )

    def authorize_replication(
        self,
        resource_group: str,
        account: str,
        pool: str,
        volume: str,
        remote_volume_resource_id: str,
    ) -> None:
        """Authorize replication from the source volume to a remote volume."""
        body = AuthorizeRequest(remote_volume_resource_id=remote_volume_resource_id)
        volumes = self.factory.netapp().volumes
        self._run(
            "authorize volume replication",
            lambda: volumes.begin_authorize_replication(
                resource_group, account, pool, volume, body
            ),
        )

    def delete_volume_replication(
        self, resource_group: str, account: str, pool: str, volume: str
    ) -> None:
        volumes = self.factory.netapp().volumes
        self._run(
            "delete volume replication",
            lambda: volumes.begin_delete_replication(
                resource_group, account, pool, volume
            ),
        )

    def delete_volume(
        self, resource_group: str, account: str, pool: str, volume: str
    ) -> None:
        volumes = self.factory.netapp().volumes
        self._run(
            "delete volume",
            lambda: volumes.begin_delete(resource_group, account, pool, volume),
        )

    # -- snapshots ---------------------------------------------------------

    def create_snapshot(
        self,
        location: str,
        resource_group: str,
        account: str,
        pool: str,
        volume: str,
        snapshot: str,
    ) -> Snapshot:
        """Take a snapshot of a volume."""
        body = Snapshot(location=location)
        snapshots = self.factory.netapp().snapshots
        return self._run(
            "create snapshot",
            lambda: snapshots.begin_create(
                resource_group, account, pool, volume, snapshot, body
            ),
        )

    def get_snapshot(
        self, resource_group: str, account: str, pool: str, volume: str, snapshot: str
    ) -> Snapshot:
        return self.factory.netapp().snapshots.get(
            resource_group, account, pool, volume, snapshot
        )

    def delete_snapshot(
        self, resource_group: str, account: str, pool: str, volume: str, snapshot: str
    ) -> None:
        snapshots = self.factory.netapp().snapshots
        self._run(
            "delete snapshot",
            lambda: snapshots.begin_delete(
                resource_group, account, pool, volume, snapshot
            ),
        )

    # -- snapshot policies -------------------------------------------------

    def create_snapshot_policy(
        self, resource_group: str, account: str, policy_name: str, policy: SnapshotPolicy
    ) -> SnapshotPolicy:
        """Create a snapshot policy; this call is synchronous in the SDK."""
        logger.debug("Submitting: create snapshot policy")
        try:
            return self.factory.netapp().snapshot_policies.create(
                resource_group, account, policy_name, policy
            )
        except AzureError as exc:
            raise SubmissionError("create snapshot policy", exc) from exc

    def update_snapshot_policy(
        self,
        resource_group: str,
        account: str,
        policy_name: str,
        patch: SnapshotPolicyPatch,
    ) -> SnapshotPolicy:
        policies = self.factory.netapp().snapshot_policies
        return self._run(
            "update snapshot policy",
            lambda: policies.begin_update(resource_group, account, policy_name, patch),
        )

    def get_snapshot_policy(
        self, resource_group: str, account: str, policy_name: str
    ) -> SnapshotPolicy:
        return self.factory.netapp().snapshot_policies.get(
            resource_group, account, policy_name
        )

    def delete_snapshot_policy(
        self, resource_group: str, account: str, policy_name: str
    ) -> None:
        policies = self.factory.netapp().snapshot_policies
        self._run(
            "delete snapshot policy",
            lambda: policies.begin_delete(resource_group, account, policy_name),
        )
