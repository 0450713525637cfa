"""Resource id parsing and classification for Azure NetApp Files.

Azure resource ids are slash-delimited key/value paths such as::

    /subscriptions/{sub}/resourceGroups/{rg}/providers/Microsoft.NetApp/
        netAppAccounts/{account}/capacityPools/{pool}/volumes/{volume}

The helpers here pull individual names out of such ids and decide which
kind of ANF resource an id points at. None of them raise: malformed or
empty input yields "" (or False / ResourceKind.UNKNOWN) and callers decide
what to do about it.
"""

from __future__ import annotations

from enum import Enum

NETAPP_PROVIDER = "Microsoft.NetApp"


class ResourceKind(str, Enum):
    """Kind of ANF resource an id refers to."""

    ACCOUNT = "Account"
    CAPACITY_POOL = "CapacityPool"
    VOLUME = "Volume"
    SNAPSHOT = "Snapshot"
    SNAPSHOT_POLICY = "SnapshotPolicy"
    UNKNOWN = "Unknown"


# Most specific first. The first marker found in an id decides its kind,
# so a snapshot id (which also contains /volumes/, /capacityPools/ and
# /netAppAccounts/) is never reported as anything but a snapshot.
KIND_MARKERS: tuple[tuple[str, ResourceKind], ...] = (
    ("/snapshots/", ResourceKind.SNAPSHOT),
    ("/volumes/", ResourceKind.VOLUME),
    ("/capacityPools/", ResourceKind.CAPACITY_POOL),
    ("/snapshotPolicies/", ResourceKind.SNAPSHOT_POLICY),
    ("/netAppAccounts/", ResourceKind.ACCOUNT),
)

# Account-level children that must not be reported as accounts.
_ACCOUNT_EXCLUDED_MARKERS = ("/snapshotPolicies/", "/backupPolicies/")


def _is_blank(value: str | None) -> bool:
    return not value or not value.strip()


def get_resource_value(resource_id: str, marker: str) -> str:
    """
    Return the path segment that follows `marker` in `resource_id`.

    Matching is case-insensitive and both arguments get a leading "/" if they
    lack one. When the resource group itself carries the marker's name
    (e.g. a group called "volumes"), the segment after the *last* occurrence
    of the marker is used instead of the first.

    Returns "" when either argument is blank or the marker is not followed
    by a segment.
    """
    if _is_blank(resource_id) or _is_blank(marker):
        return ""

    if not resource_id.startswith("/"):
        resource_id = f"/{resource_id}"
    if not marker.startswith("/"):
        marker = f"/{marker}"

    lowered = resource_id.lower()
    lowered_marker = marker.lower()

    if f"/resourcegroups{lowered_marker}" in lowered:
        index = lowered.rfind(lowered_marker)
        parts = resource_id[index + len(marker) :].split("/")
        return parts[1] if len(parts) > 1 else ""

    index = lowered.find(lowered_marker)
    if index < 0:
        return ""
    parts = resource_id[index + len(marker) :].split("/")
    return parts[1] if len(parts) > 1 else ""


def get_resource_name(resource_id: str) -> str:
    """Return the last segment of a resource id."""
    if _is_blank(resource_id):
        return ""
    return resource_id[resource_id.rfind("/") + 1 :]


def get_subscription(resource_id: str) -> str:
    """Return the subscription id."""
    return get_resource_value(resource_id, "/subscriptions")


def get_resource_group(resource_id: str) -> str:
    """Return the resource group name."""
    return get_resource_value(resource_id, "/resourceGroups")


def get_anf_account(resource_id: str) -> str:
    """Return the NetApp account name."""
    return get_resource_value(resource_id, "/netAppAccounts")


def get_anf_capacity_pool(resource_id: str) -> str:
    """Return the capacity pool name."""
    return get_resource_value(resource_id, "/capacityPools")


def get_anf_volume(resource_id: str) -> str:
    """Return the volume name."""
    return get_resource_value(resource_id, "/volumes")


def get_anf_snapshot(resource_id: str) -> str:
    """Return the snapshot name."""
    return get_resource_value(resource_id, "/snapshots")


def get_anf_snapshot_policy(resource_id: str) -> str:
    """Return the snapshot policy name."""
    return get_resource_value(resource_id, "/snapshotPolicies")


def is_anf_resource(resource_id: str) -> bool:
    """Return True if the id belongs to the Microsoft.NetApp provider (case-sensitive)."""
    if _is_blank(resource_id):
        return False
    return NETAPP_PROVIDER in resource_id


def classify(resource_id: str) -> ResourceKind:
    """
    Return the ResourceKind of an ANF resource id.

    Markers are tried in KIND_MARKERS order and the first one present wins.
    Ids outside the Microsoft.NetApp provider, blank ids and ids matching
    no marker are UNKNOWN.
    """
    if not is_anf_resource(resource_id):
        return ResourceKind.UNKNOWN

    for marker, kind in KIND_MARKERS:
        if marker not in resource_id:
            continue
        if kind is ResourceKind.ACCOUNT and any(
            excluded in resource_id for excluded in _ACCOUNT_EXCLUDED_MARKERS
        ):
            return ResourceKind.UNKNOWN
        return kind

    return ResourceKind.UNKNOWN


def is_anf_snapshot(resource_id: str) -> bool:
    return classify(resource_id) is ResourceKind.SNAPSHOT


def is_anf_volume(resource_id: str) -> bool:
    return classify(resource_id) is ResourceKind.VOLUME


def is_anf_capacity_pool(resource_id: str) -> bool:
    return classify(resource_id) is ResourceKind.CAPACITY_POOL


def is_anf_snapshot_policy(resource_id: str) -> bool:
    return classify(resource_id) is ResourceKind.SNAPSHOT_POLICY


def is_anf_account(resource_id: str) -> bool:
    return classify(resource_id) is ResourceKind.ACCOUNT


def parse_resource_id(resource_id: str) -> dict[str, str]:
    """Return every known name segment of an id, keyed by segment label."""
    return {
        "subscription": get_subscription(resource_id),
        "resource_group": get_resource_group(resource_id),
        "account": get_anf_account(resource_id),
        "capacity_pool": get_anf_capacity_pool(resource_id),
        "volume": get_anf_volume(resource_id),
        "snapshot": get_anf_snapshot(resource_id),
        "snapshot_policy": get_anf_snapshot_policy(resource_id),
        "name": get_resource_name(resource_id),
    }
