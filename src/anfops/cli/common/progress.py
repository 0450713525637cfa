"""Progress rendering for convergence polls."""

from __future__ import annotations

import threading
import time

from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from anfops.cli.common.output import console
from anfops.core.poller import (
    ConvergenceResult,
    PollMode,
    PollRequest,
    ResourceReader,
    poll,
)
from anfops.core.uri import classify, get_resource_name


def _describe(request: PollRequest) -> str:
    """Return the label shown next to the spinner, e.g. `Volume vol01 -> gone`."""
    target = "gone" if request.mode is PollMode.AWAIT_ABSENCE else "ready"
    kind = classify(request.path).value
    return f"{kind} {get_resource_name(request.path)} -> {target}"


def poll_with_progress(
    reader: ResourceReader, request: PollRequest
) -> ConvergenceResult:
    """
    Run a convergence poll while showing a live progress line:
      - spinner + target description
      - attempts used out of the retry budget
      - elapsed time

    Ctrl-C during a sleep stops the poll and yields an ABORTED result
    instead of a traceback.
    """
    aborted = threading.Event()

    def _sleep(seconds: float) -> None:
        try:
            time.sleep(seconds)
        except KeyboardInterrupt:
            aborted.set()

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.description}[/]"),
        BarColumn(),
        TaskProgressColumn(),
        TextColumn("attempt {task.completed:.0f}/{task.total:.0f}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )

    with progress:
        task_id = progress.add_task(
            _describe(request), total=max(request.max_retries, 1)
        )

        def _on_attempt(attempt: int) -> None:
            progress.update(task_id, completed=attempt)

        return poll(
            reader,
            request,
            sleep=_sleep,
            should_abort=aborted.is_set,
            on_attempt=_on_attempt,
        )
