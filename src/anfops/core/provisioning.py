"""Build and tear down the demo ANF topology.

The demo creates, in order:

    account -> capacity pool -> NFSv3 volume -> NFSv4.1 volume
        -> snapshot of the NFSv3 volume -> volume restored from that snapshot

then resizes the NFSv4.1 volume. Every create is followed by a wait until the
resource is readable; teardown deletes in reverse order and waits until each
resource is gone before moving to its parent.

This module is free of CLI concerns; progress is reported through a plain
callable so different frontends (CLI, tests) can render it their own way.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Protocol

from azure.core.exceptions import AzureError

from anfops.core.config import DEFAULT_POLL_INTERVAL_SECONDS, DEFAULT_POLL_RETRIES
from anfops.core.errors import ValidationError
from anfops.core.poller import (
    ResourceReader,
    wait_for_anf_resource,
    wait_for_no_anf_resource,
)
from anfops.core.units import gib_to_bytes, tib_to_bytes
from anfops.core.uri import (
    ResourceKind,
    classify,
    get_anf_account,
    get_anf_capacity_pool,
    get_anf_snapshot,
    get_anf_snapshot_policy,
    get_anf_volume,
    get_resource_group,
)

logger = logging.getLogger(__name__)

SUBNET_API_VERSION = "2022-07-01"

Reporter = Callable[[str], None]


class NetAppGateway(ResourceReader, Protocol):
    """Operations of NetAppAdapter used by the demo driver and delete helper."""

    def get_resource_by_id(self, resource_id: str, api_version: str) -> Any:
        ...

    def create_account(self, *args: Any, **kwargs: Any) -> Any:
        ...

    def create_capacity_pool(self, *args: Any, **kwargs: Any) -> Any:
        ...

    def create_volume(self, *args: Any, **kwargs: Any) -> Any:
        ...

    def resize_volume(self, *args: Any, **kwargs: Any) -> Any:
        ...

    def create_snapshot(self, *args: Any, **kwargs: Any) -> Any:
        ...

    def delete_snapshot(self, *args: Any, **kwargs: Any) -> None:
        ...

    def delete_snapshot_policy(self, *args: Any, **kwargs: Any) -> None:
        ...

    def delete_volume(self, *args: Any, **kwargs: Any) -> None:
        ...

    def delete_capacity_pool(self, *args: Any, **kwargs: Any) -> None:
        ...

    def delete_account(self, *args: Any, **kwargs: Any) -> None:
        ...


@dataclass(frozen=True)
class DemoSettings:
    """
    Inputs for the demo topology.

    Attributes:
        location: Azure region for every resource.
        resource_group: Existing resource group to create resources in.
        subnet_id: Resource id of a subnet delegated to Microsoft.NetApp/volumes.
        pool_size_tib: Capacity pool size in TiB (4 TiB is the service minimum).
        volume_size_gib: Initial quota of each volume in GiB.
        resized_volume_size_gib: New quota of the NFSv4.1 volume after resize.
    """

    location: str
    resource_group: str
    subnet_id: str
    account_name: str = "anf01"
    pool_name: str = "pool01"
    service_level: str = "Premium"
    pool_size_tib: int = 4
    volume_size_gib: int = 100
    resized_volume_size_gib: int = 200
    nfsv3_volume_name: str = "nfsv3-vol01"
    nfsv41_volume_name: str = "nfsv41-vol01"
    snapshot_name: str = "snapshot01"
    clone_volume_name: str = "nfsv3-vol01-from-snapshot"
    interval_seconds: int = DEFAULT_POLL_INTERVAL_SECONDS
    max_retries: int = DEFAULT_POLL_RETRIES
    tags: Mapping[str, str] = field(default_factory=lambda: {"Author": "anfops"})


@dataclass
class Topology:
    """Resource ids created by the demo, in creation order."""

    resource_ids: list[str] = field(default_factory=list)

    def add(self, resource_id: str) -> str:
        self.resource_ids.append(resource_id)
        return resource_id


def _resource_id(resource: Any, what: str) -> str:
    rid = getattr(resource, "id", None)
    if not rid:
        raise ValidationError(f"{what} was created but has no resource id")
    return rid


def provision_topology(
    gateway: NetAppGateway,
    settings: DemoSettings,
    *,
    report: Reporter = logger.info,
    sleep: Callable[[float], None] = time.sleep,
    topology: Topology | None = None,
) -> Topology:
    """
    Create the demo topology and return the ids of what was created.

    If `topology` is given it is filled in place, so a caller still knows
    what exists when a later step raises.
    """
    topology = topology if topology is not None else Topology()
    s = settings

    def wait(resource_id: str) -> None:
        wait_for_anf_resource(
            gateway, resource_id, s.interval_seconds, s.max_retries, sleep=sleep
        )

    report(f"Checking subnet {s.subnet_id}")
    try:
        gateway.get_resource_by_id(s.subnet_id, SUBNET_API_VERSION)
    except AzureError as exc:
        raise ValidationError(f"subnet {s.subnet_id} not found: {exc}") from exc

    report(f"Creating account {s.account_name}")
    account = gateway.create_account(
        s.location, s.resource_group, s.account_name, tags=s.tags
    )
    wait(topology.add(_resource_id(account, "account")))

    report(
        f"Creating {s.service_level} capacity pool {s.pool_name} "
        f"({s.pool_size_tib} TiB)"
    )
    pool = gateway.create_capacity_pool(
        s.location,
        s.resource_group,
        s.account_name,
        s.pool_name,
        s.service_level,
        tib_to_bytes(s.pool_size_tib),
        tags=s.tags,
    )
    wait(topology.add(_resource_id(pool, "capacity pool")))

    for name, protocol in (
        (s.nfsv3_volume_name, "NFSv3"),
        (s.nfsv41_volume_name, "NFSv4.1"),
    ):
        report(f"Creating {protocol} volume {name} ({s.volume_size_gib} GiB)")
        volume = gateway.create_volume(
            s.location,
            s.resource_group,
            s.account_name,
            s.pool_name,
            name,
            s.service_level,
            s.subnet_id,
            [protocol],
            gib_to_bytes(s.volume_size_gib),
            unix_read_only=False,
            unix_read_write=True,
            tags=s.tags,
        )
        wait(topology.add(_resource_id(volume, f"volume {name}")))

    report(f"Creating snapshot {s.snapshot_name} of {s.nfsv3_volume_name}")
    snapshot = gateway.create_snapshot(
        s.location,
        s.resource_group,
        s.account_name,
        s.pool_name,
        s.nfsv3_volume_name,
        s.snapshot_name,
    )
    wait(topology.add(_resource_id(snapshot, "snapshot")))
    snapshot_id = getattr(snapshot, "snapshot_id", None)
    if not snapshot_id:
        raise ValidationError(f"snapshot {s.snapshot_name} has no snapshot id")

    report(f"Creating volume {s.clone_volume_name} from snapshot {s.snapshot_name}")
    clone = gateway.create_volume(
        s.location,
        s.resource_group,
        s.account_name,
        s.pool_name,
        s.clone_volume_name,
        s.service_level,
        s.subnet_id,
        ["NFSv3"],
        gib_to_bytes(s.volume_size_gib),
        unix_read_only=False,
        unix_read_write=True,
        snapshot_id=snapshot_id,
        tags=s.tags,
    )
    wait(topology.add(_resource_id(clone, f"volume {s.clone_volume_name}")))

    report(
        f"Resizing {s.nfsv41_volume_name} from {s.volume_size_gib} GiB "
        f"to {s.resized_volume_size_gib} GiB"
    )
    gateway.resize_volume(
        s.location,
        s.resource_group,
        s.account_name,
        s.pool_name,
        s.nfsv41_volume_name,
        gib_to_bytes(s.resized_volume_size_gib),
    )

    return topology


def delete_resource(gateway: NetAppGateway, resource_id: str) -> ResourceKind:
    """
    Delete an ANF resource by id, dispatching on its kind.

    Returns the kind that was deleted.

    Raises:
        ValidationError: If the id is not a recognised ANF resource id.
    """
    kind = classify(resource_id)
    rg = get_resource_group(resource_id)
    account = get_anf_account(resource_id)

    if kind is ResourceKind.SNAPSHOT:
        gateway.delete_snapshot(
            rg,
            account,
            get_anf_capacity_pool(resource_id),
            get_anf_volume(resource_id),
            get_anf_snapshot(resource_id),
        )
    elif kind is ResourceKind.VOLUME:
        gateway.delete_volume(
            rg, account, get_anf_capacity_pool(resource_id), get_anf_volume(resource_id)
        )
    elif kind is ResourceKind.CAPACITY_POOL:
        gateway.delete_capacity_pool(rg, account, get_anf_capacity_pool(resource_id))
    elif kind is ResourceKind.SNAPSHOT_POLICY:
        gateway.delete_snapshot_policy(
            rg, account, get_anf_snapshot_policy(resource_id)
        )
    elif kind is ResourceKind.ACCOUNT:
        gateway.delete_account(rg, account)
    else:
        raise ValidationError(f"not a recognised ANF resource id: {resource_id}")

    return kind


def teardown_topology(
    gateway: NetAppGateway,
    topology: Topology,
    *,
    interval_seconds: int = DEFAULT_POLL_INTERVAL_SECONDS,
    max_retries: int = DEFAULT_POLL_RETRIES,
    report: Reporter = logger.info,
    sleep: Callable[[float], None] = time.sleep,
) -> list[str]:
    """
    Delete every resource in `topology`, children before parents.

    Returns the ids that were deleted, in deletion order.
    """
    deleted: list[str] = []
    for resource_id in reversed(topology.resource_ids):
        kind = classify(resource_id)
        report(f"Deleting {kind.value} {resource_id}")
        delete_resource(gateway, resource_id)
        wait_for_no_anf_resource(
            gateway, resource_id, interval_seconds, max_retries, sleep=sleep
        )
        deleted.append(resource_id)
    return deleted
