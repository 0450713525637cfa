"""Convergence polling for ANF resources.

ARM caches resource state, so a read straight after a create or delete can
still report the old state. The functions here re-read a resource at a fixed
interval until it shows up (after a create) or disappears (after a delete),
within a fixed retry budget. There is no backoff: every attempt sleeps for
the same interval, and the sleep comes *before* the check, including on the
first attempt.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Protocol

from azure.core.exceptions import AzureError

from anfops.core.config import DEFAULT_POLL_INTERVAL_SECONDS, DEFAULT_POLL_RETRIES
from anfops.core.errors import ConvergenceTimeoutError
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


class PollMode(str, Enum):
    """What the poller waits for."""

    AWAIT_ABSENCE = "AWAIT_ABSENCE"
    AWAIT_PRESENCE = "AWAIT_PRESENCE"


class ConvergenceState(str, Enum):
    """
    Outcome of a convergence loop.

    Values:
        CONVERGED: The expected state was observed.
        EXHAUSTED: All retries were used without observing it.
        ABORTED: The caller asked the loop to stop.
    """

    CONVERGED = "CONVERGED"
    EXHAUSTED = "EXHAUSTED"
    ABORTED = "ABORTED"


@dataclass(frozen=True)
class PollRequest:
    """A single wait-for-resource request."""

    path: str
    interval_seconds: int = DEFAULT_POLL_INTERVAL_SECONDS
    max_retries: int = DEFAULT_POLL_RETRIES
    mode: PollMode = PollMode.AWAIT_PRESENCE
    check_replication_status: bool = False


@dataclass(frozen=True)
class ConvergenceResult:
    """Final state of a poll, the attempts it took and the last error seen."""

    state: ConvergenceState
    attempts: int
    last_error: BaseException | None = None

    @property
    def converged(self) -> bool:
        return self.state is ConvergenceState.CONVERGED


class ResourceReader(Protocol):
    """Read operations the poller needs from the gateway."""

    def get_account(self, resource_group: str, account: str) -> Any:
        ...

    def get_capacity_pool(self, resource_group: str, account: str, pool: str) -> Any:
        ...

    def get_volume(
        self, resource_group: str, account: str, pool: str, volume: str
    ) -> Any:
        ...

    def get_volume_replication_status(
        self, resource_group: str, account: str, pool: str, volume: str
    ) -> Any:
        ...

    def get_snapshot(
        self, resource_group: str, account: str, pool: str, volume: str, snapshot: str
    ) -> Any:
        ...

    def get_snapshot_policy(
        self, resource_group: str, account: str, policy_name: str
    ) -> Any:
        ...


def converge(
    check: Callable[[], BaseException | None],
    succeeded: Callable[[BaseException | None], bool],
    *,
    interval_seconds: int,
    max_retries: int,
    sleep: Callable[[float], None] = time.sleep,
    should_abort: Callable[[], bool] | None = None,
    on_attempt: Callable[[int], None] | None = None,
) -> ConvergenceResult:
    """
    Run a fixed-interval convergence loop.

    Each attempt sleeps `interval_seconds`, then calls `check()`, which
    returns the error observed by that attempt (or None). `succeeded` decides
    whether that observation means the loop has converged.

    Args:
        check: Performs one probe and returns its error, or None on success.
        succeeded: Predicate over the probe result.
        interval_seconds: Sleep before every attempt.
        max_retries: Number of attempts.
        sleep: Sleep function (injectable for tests).
        should_abort: Checked after every sleep; True stops the loop.
        on_attempt: Called with the 1-based attempt number before each probe.

    Returns:
        A ConvergenceResult carrying the last observed error.
    """
    last_error: BaseException | None = None

    for attempt in range(1, max_retries + 1):
        sleep(interval_seconds)
        if should_abort is not None and should_abort():
            return ConvergenceResult(ConvergenceState.ABORTED, attempt - 1, last_error)
        if on_attempt is not None:
            on_attempt(attempt)

        last_error = check()
        if succeeded(last_error):
            return ConvergenceResult(ConvergenceState.CONVERGED, attempt, last_error)

    return ConvergenceResult(ConvergenceState.EXHAUSTED, max_retries, last_error)


def probe(
    reader: ResourceReader,
    path: str,
    *,
    check_replication_status: bool = False,
    previous: BaseException | None = None,
) -> BaseException | None:
    """
    Read the resource `path` points at, dispatching on its kind.

    Returns None if the read succeeded and the AzureError otherwise. For
    volumes with `check_replication_status` set, the replication status is
    read instead of the volume. An UNKNOWN kind makes no call and hands back
    `previous` unchanged.
    """
    kind = classify(path)
    rg = get_resource_group(path)

    try:
        if kind is ResourceKind.SNAPSHOT:
            reader.get_snapshot(
                rg,
                get_anf_account(path),
                get_anf_capacity_pool(path),
                get_anf_volume(path),
                get_anf_snapshot(path),
            )
        elif kind is ResourceKind.VOLUME:
            get = (
                reader.get_volume_replication_status
                if check_replication_status
                else reader.get_volume
            )
            get(
                rg,
                get_anf_account(path),
                get_anf_capacity_pool(path),
                get_anf_volume(path),
            )
        elif kind is ResourceKind.CAPACITY_POOL:
            reader.get_capacity_pool(
                rg, get_anf_account(path), get_anf_capacity_pool(path)
            )
        elif kind is ResourceKind.SNAPSHOT_POLICY:
            reader.get_snapshot_policy(
                rg, get_anf_account(path), get_anf_snapshot_policy(path)
            )
        elif kind is ResourceKind.ACCOUNT:
            reader.get_account(rg, get_anf_account(path))
        else:
            # TODO: decide whether an unclassifiable id should fail fast;
            # for now it is a no-op and the previous result stands.
            logger.debug("No reader for %s; skipping probe", path)
            return previous
    except AzureError as exc:
        logger.debug("Probe of %s failed: %s", path, exc)
        return exc

    return None


def poll(
    reader: ResourceReader,
    request: PollRequest,
    *,
    sleep: Callable[[float], None] = time.sleep,
    should_abort: Callable[[], bool] | None = None,
    on_attempt: Callable[[int], None] | None = None,
) -> ConvergenceResult:
    """Run `request` against `reader` and return the raw ConvergenceResult."""
    if request.mode is PollMode.AWAIT_ABSENCE:

        def succeeded(err: BaseException | None) -> bool:
            # A failing read means the resource is gone.
            return err is not None

    else:

        def succeeded(err: BaseException | None) -> bool:
            return err is None

    previous: BaseException | None = None

    def check() -> BaseException | None:
        nonlocal previous
        previous = probe(
            reader,
            request.path,
            check_replication_status=request.check_replication_status,
            previous=previous,
        )
        return previous

    logger.debug(
        "Polling %s (%s, every %ss, %s retries)",
        request.path,
        request.mode.value,
        request.interval_seconds,
        request.max_retries,
    )
    return converge(
        check,
        succeeded,
        interval_seconds=request.interval_seconds,
        max_retries=request.max_retries,
        sleep=sleep,
        should_abort=should_abort,
        on_attempt=on_attempt,
    )


def raise_for_result(request: PollRequest, result: ConvergenceResult) -> None:
    """Raise ConvergenceTimeoutError unless the poll converged."""
    if result.converged:
        return
    if result.state is ConvergenceState.ABORTED:
        raise ConvergenceTimeoutError(
            f"polling aborted after {result.attempts} attempt(s)",
            retries=result.attempts,
            last_error=result.last_error,
        )
    if request.mode is PollMode.AWAIT_ABSENCE:
        raise ConvergenceTimeoutError(
            f"exceeded number of retries: {request.max_retries}",
            retries=request.max_retries,
            last_error=result.last_error,
        )
    raise ConvergenceTimeoutError(
        "resource still not found after number of retries: "
        f"{request.max_retries}, error: {result.last_error}",
        retries=request.max_retries,
        last_error=result.last_error,
    )


def wait_for_no_anf_resource(
    reader: ResourceReader,
    path: str,
    interval_seconds: int = DEFAULT_POLL_INTERVAL_SECONDS,
    max_retries: int = DEFAULT_POLL_RETRIES,
    check_replication_status: bool = False,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """
    Block until a deleted resource stops being readable.

    Raises:
        ConvergenceTimeoutError: If the resource is still readable after
            `max_retries` attempts.
    """
    request = PollRequest(
        path=path,
        interval_seconds=interval_seconds,
        max_retries=max_retries,
        mode=PollMode.AWAIT_ABSENCE,
        check_replication_status=check_replication_status,
    )
    raise_for_result(request, poll(reader, request, sleep=sleep))


def wait_for_anf_resource(
    reader: ResourceReader,
    path: str,
    interval_seconds: int = DEFAULT_POLL_INTERVAL_SECONDS,
    max_retries: int = DEFAULT_POLL_RETRIES,
    check_replication_status: bool = False,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """
    Block until a created resource becomes readable.

    Raises:
        ConvergenceTimeoutError: If the resource is still unreadable after
            `max_retries` attempts; carries the last read error.
    """
    request = PollRequest(
        path=path,
        interval_seconds=interval_seconds,
        max_retries=max_retries,
        mode=PollMode.AWAIT_PRESENCE,
        check_replication_status=check_replication_status,
    )
    raise_for_result(request, poll(reader, request, sleep=sleep))
