from types import SimpleNamespace

import pytest
from azure.core.exceptions import ResourceNotFoundError

from anfops.core.errors import ConvergenceTimeoutError
from anfops.core.poller import (
    ConvergenceState,
    PollMode,
    PollRequest,
    converge,
    poll,
    probe,
    wait_for_anf_resource,
    wait_for_no_anf_resource,
)

ACCOUNT_ID = (
    "/subscriptions/sub/resourceGroups/rg/providers/Microsoft.NetApp"
    "/netAppAccounts/acc"
)
POOL_ID = f"{ACCOUNT_ID}/capacityPools/pool"
VOLUME_ID = f"{POOL_ID}/volumes/vol"
SNAPSHOT_ID = f"{VOLUME_ID}/snapshots/snap"
POLICY_ID = f"{ACCOUNT_ID}/snapshotPolicies/daily"
SUBNET_ID = (
    "/subscriptions/sub/resourceGroups/rg/providers/Microsoft.Network"
    "/virtualNetworks/vnet/subnets/sn"
)


class _Reader:
    """Records reads; `outcomes` is consumed per read (True = read fails)."""

    def __init__(self, *, fail: bool = False, outcomes: list[bool] | None = None):
        self.fail = fail
        self.outcomes = list(outcomes or [])
        self.calls: list[tuple[str, tuple]] = []

    def _read(self, name: str, *args):
        self.calls.append((name, args))
        fail = self.outcomes.pop(0) if self.outcomes else self.fail
        if fail:
            raise ResourceNotFoundError(f"{name} not found")
        return SimpleNamespace(name=args[-1])

    def get_account(self, resource_group, account):
        return self._read("account", resource_group, account)

    def get_capacity_pool(self, resource_group, account, pool):
        return self._read("pool", resource_group, account, pool)

    def get_volume(self, resource_group, account, pool, volume):
        return self._read("volume", resource_group, account, pool, volume)

    def get_volume_replication_status(self, resource_group, account, pool, volume):
        return self._read("replication", resource_group, account, pool, volume)

    def get_snapshot(self, resource_group, account, pool, volume, snapshot):
        return self._read("snapshot", resource_group, account, pool, volume, snapshot)

    def get_snapshot_policy(self, resource_group, account, policy_name):
        return self._read("policy", resource_group, account, policy_name)


class _Sleeps(list):
    def __call__(self, seconds):
        self.append(seconds)


def test_await_absence_succeeds_after_one_sleep_when_resource_is_gone():
    sleeps = _Sleeps()
    reader = _Reader(fail=True)

    wait_for_no_anf_resource(reader, VOLUME_ID, 5, 3, sleep=sleeps)

    assert sleeps == [5]
    assert len(reader.calls) == 1


def test_await_absence_fails_after_all_retries_when_resource_stays():
    sleeps = _Sleeps()
    reader = _Reader(fail=False)

    with pytest.raises(ConvergenceTimeoutError, match="exceeded number of retries: 3"):
        wait_for_no_anf_resource(reader, VOLUME_ID, 5, 3, sleep=sleeps)

    assert sleeps == [5, 5, 5]
    assert len(reader.calls) == 3


def test_await_presence_succeeds_after_one_sleep_when_resource_exists():
    sleeps = _Sleeps()
    reader = _Reader(fail=False)

    wait_for_anf_resource(reader, POOL_ID, 2, 3, sleep=sleeps)

    assert sleeps == [2]


def test_await_presence_reports_last_error_after_all_retries():
    sleeps = _Sleeps()
    reader = _Reader(fail=True)

    with pytest.raises(ConvergenceTimeoutError, match="still not found") as excinfo:
        wait_for_anf_resource(reader, POOL_ID, 2, 3, sleep=sleeps)

    assert sleeps == [2, 2, 2]
    assert excinfo.value.retries == 3
    assert isinstance(excinfo.value.last_error, ResourceNotFoundError)


def test_await_absence_converges_once_reads_start_failing():
    reader = _Reader(outcomes=[False, False, True])

    request = PollRequest(
        path=SNAPSHOT_ID,
        interval_seconds=0,
        max_retries=5,
        mode=PollMode.AWAIT_ABSENCE,
    )

    result = poll(reader, request, sleep=_Sleeps())

    assert result.state is ConvergenceState.CONVERGED
    assert result.attempts == 3


@pytest.mark.parametrize(
    "path,expected",
    [
        (SNAPSHOT_ID, ("snapshot", ("rg", "acc", "pool", "vol", "snap"))),
        (VOLUME_ID, ("volume", ("rg", "acc", "pool", "vol"))),
        (POOL_ID, ("pool", ("rg", "acc", "pool"))),
        (POLICY_ID, ("policy", ("rg", "acc", "daily"))),
        (ACCOUNT_ID, ("account", ("rg", "acc"))),
    ],
)
def test_probe_dispatches_on_kind(path, expected):
    reader = _Reader()

    assert probe(reader, path) is None
    assert reader.calls == [expected]


def test_probe_reads_replication_status_for_volumes_only():
    reader = _Reader()

    probe(reader, VOLUME_ID, check_replication_status=True)
    probe(reader, SNAPSHOT_ID, check_replication_status=True)

    assert [name for name, _ in reader.calls] == ["replication", "snapshot"]


def test_probe_returns_error_from_failed_read():
    err = probe(_Reader(fail=True), ACCOUNT_ID)

    assert isinstance(err, ResourceNotFoundError)


def test_probe_of_unknown_kind_makes_no_call_and_keeps_previous():
    reader = _Reader()
    previous = ResourceNotFoundError("earlier")

    assert probe(reader, SUBNET_ID, previous=previous) is previous
    assert probe(reader, SUBNET_ID) is None
    assert reader.calls == []


def test_unknown_kind_await_presence_converges_immediately():
    sleeps = _Sleeps()
    request = PollRequest(path=SUBNET_ID, interval_seconds=1, max_retries=3)

    result = poll(_Reader(), request, sleep=sleeps)

    assert result.state is ConvergenceState.CONVERGED
    assert sleeps == [1]


def test_unknown_kind_await_absence_exhausts_budget():
    request = PollRequest(
        path=SUBNET_ID, interval_seconds=1, max_retries=3, mode=PollMode.AWAIT_ABSENCE
    )

    result = poll(_Reader(), request, sleep=_Sleeps())

    assert result.state is ConvergenceState.EXHAUSTED
    assert result.attempts == 3


def test_converge_aborts_when_asked():
    checks: list[int] = []

    result = converge(
        lambda: checks.append(1),
        lambda err: False,
        interval_seconds=0,
        max_retries=5,
        sleep=_Sleeps(),
        should_abort=lambda: len(checks) >= 2,
    )

    assert result.state is ConvergenceState.ABORTED
    assert result.attempts == 2
    assert len(checks) == 2


def test_converge_reports_each_attempt():
    attempts: list[int] = []

    result = converge(
        lambda: None,
        lambda err: False,
        interval_seconds=0,
        max_retries=3,
        sleep=_Sleeps(),
        on_attempt=attempts.append,
    )

    assert attempts == [1, 2, 3]
    assert result.state is ConvergenceState.EXHAUSTED


def test_zero_retries_never_sleeps():
    sleeps = _Sleeps()

    with pytest.raises(ConvergenceTimeoutError):
        wait_for_anf_resource(_Reader(), VOLUME_ID, 1, 0, sleep=sleeps)

    assert sleeps == []
