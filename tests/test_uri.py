import pytest

from anfops.core.uri import (
    ResourceKind,
    classify,
    get_anf_account,
    get_anf_capacity_pool,
    get_anf_snapshot,
    get_anf_snapshot_policy,
    get_anf_volume,
    get_resource_group,
    get_resource_name,
    get_resource_value,
    get_subscription,
    is_anf_account,
    is_anf_capacity_pool,
    is_anf_resource,
    is_anf_snapshot,
    is_anf_snapshot_policy,
    is_anf_volume,
    parse_resource_id,
)

ACCOUNT_ID = (
    "/subscriptions/sub-1/resourceGroups/rg-1/providers/Microsoft.NetApp"
    "/netAppAccounts/acc1"
)
POOL_ID = f"{ACCOUNT_ID}/capacityPools/pool1"
VOLUME_ID = f"{POOL_ID}/volumes/vol1"
SNAPSHOT_ID = f"{VOLUME_ID}/snapshots/snap1"
POLICY_ID = f"{ACCOUNT_ID}/snapshotPolicies/policy1"
BACKUP_POLICY_ID = f"{ACCOUNT_ID}/backupPolicies/bp1"
SUBNET_ID = (
    "/subscriptions/sub-1/resourceGroups/rg-1/providers/Microsoft.Network"
    "/virtualNetworks/vnet1/subnets/anf-sn"
)

PREDICATES = (
    is_anf_snapshot,
    is_anf_volume,
    is_anf_capacity_pool,
    is_anf_snapshot_policy,
    is_anf_account,
)
GETTERS = (
    get_subscription,
    get_resource_group,
    get_anf_account,
    get_anf_capacity_pool,
    get_anf_volume,
    get_anf_snapshot,
    get_anf_snapshot_policy,
    get_resource_name,
)


def test_snapshot_id_yields_every_segment():
    assert get_subscription(SNAPSHOT_ID) == "sub-1"
    assert get_resource_group(SNAPSHOT_ID) == "rg-1"
    assert get_anf_account(SNAPSHOT_ID) == "acc1"
    assert get_anf_capacity_pool(SNAPSHOT_ID) == "pool1"
    assert get_anf_volume(SNAPSHOT_ID) == "vol1"
    assert get_anf_snapshot(SNAPSHOT_ID) == "snap1"
    assert get_resource_name(SNAPSHOT_ID) == "snap1"


@pytest.mark.parametrize("name", ["vol1", "data-01", "volumes2", "X"])
def test_volume_marker_extracts_name(name: str):
    path = f"{POOL_ID}/volumes/{name}/snapshots/s1"

    assert get_resource_value(path, "/volumes") == name


@pytest.mark.parametrize(
    "sub,rg,account,pool,volume",
    [
        ("0000-1111", "prod-rg", "acct", "pool-a", "vol-a"),
        ("abc", "RG.With.Dots", "Account_1", "p", "v"),
        ("abc", "volumes", "acct", "pool", "vol9"),
    ],
)
def test_round_trip_of_built_path(sub, rg, account, pool, volume):
    path = (
        f"/subscriptions/{sub}/resourceGroups/{rg}/providers/Microsoft.NetApp"
        f"/netAppAccounts/{account}/capacityPools/{pool}/volumes/{volume}"
    )

    assert get_subscription(path) == sub
    assert get_resource_group(path) == rg
    assert get_anf_account(path) == account
    assert get_anf_capacity_pool(path) == pool
    assert get_anf_volume(path) == volume


def test_matching_is_case_insensitive_and_keeps_value_case():
    path = "/SUBSCRIPTIONS/Sub-A/RESOURCEGROUPS/My-RG/providers/Microsoft.NetApp"

    assert get_subscription(path) == "Sub-A"
    assert get_resource_group(path) == "My-RG"


def test_resource_group_named_like_marker_uses_last_occurrence():
    path = (
        "/subscriptions/s/resourceGroups/snapshots/providers/Microsoft.NetApp"
        "/netAppAccounts/a/capacityPools/p/volumes/v/snapshots/Snap-1"
    )

    assert get_anf_snapshot(path) == "Snap-1"
    assert get_resource_group(path) == "snapshots"


def test_resource_group_named_like_marker_without_child_is_empty():
    path = "/subscriptions/s/resourceGroups/volumes"

    assert get_anf_volume(path) == ""


def test_missing_leading_slashes_are_tolerated():
    path = VOLUME_ID.lstrip("/")

    assert get_resource_value(path, "volumes") == "vol1"
    assert get_resource_value(path, "subscriptions") == "sub-1"


def test_absent_or_trailing_marker_yields_empty():
    assert get_anf_snapshot(VOLUME_ID) == ""
    assert get_resource_value("/subscriptions", "/subscriptions") == ""


@pytest.mark.parametrize("value", ["", "   ", "\t\n"])
def test_blank_input_is_empty_everywhere(value: str):
    for getter in GETTERS:
        assert getter(value) == ""
    for predicate in PREDICATES:
        assert predicate(value) is False
    assert is_anf_resource(value) is False
    assert classify(value) is ResourceKind.UNKNOWN
    assert get_resource_value(VOLUME_ID, value) == ""


@pytest.mark.parametrize(
    "path,kind",
    [
        (ACCOUNT_ID, ResourceKind.ACCOUNT),
        (POOL_ID, ResourceKind.CAPACITY_POOL),
        (VOLUME_ID, ResourceKind.VOLUME),
        (SNAPSHOT_ID, ResourceKind.SNAPSHOT),
        (POLICY_ID, ResourceKind.SNAPSHOT_POLICY),
        (BACKUP_POLICY_ID, ResourceKind.UNKNOWN),
        (SUBNET_ID, ResourceKind.UNKNOWN),
        (VOLUME_ID.replace("Microsoft.NetApp", "microsoft.netapp"), ResourceKind.UNKNOWN),
    ],
)
def test_classify(path: str, kind: ResourceKind):
    assert classify(path) is kind


@pytest.mark.parametrize(
    "path",
    [
        ACCOUNT_ID,
        POOL_ID,
        VOLUME_ID,
        SNAPSHOT_ID,
        POLICY_ID,
        BACKUP_POLICY_ID,
        SUBNET_ID,
        f"{POLICY_ID}/volumes/x/",
        f"{ACCOUNT_ID}/snapshotPolicies/p/capacityPools/q/",
    ],
)
def test_predicates_are_mutually_exclusive(path: str):
    assert sum(predicate(path) for predicate in PREDICATES) <= 1


def test_account_excludes_backup_policy_children():
    assert is_anf_account(ACCOUNT_ID) is True
    assert is_anf_account(BACKUP_POLICY_ID) is False
    assert is_anf_snapshot_policy(POLICY_ID) is True
    assert is_anf_account(POLICY_ID) is False


def test_parse_resource_id_reports_all_segments():
    parsed = parse_resource_id(POLICY_ID)

    assert parsed["account"] == "acc1"
    assert parsed["snapshot_policy"] == "policy1"
    assert parsed["volume"] == ""
    assert parsed["name"] == "policy1"
