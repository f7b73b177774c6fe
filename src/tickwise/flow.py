"""Sequencing helpers: step chains, next-tick debounce and the sync bridge."""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from tickwise.runtime import Runtime


def step(*tasks: Callable[..., Any]) -> None:
    """Run continuation-passing *tasks* in order.

    Each task is called with a ``next`` continuation followed by whatever the
    previous task passed to ``next``. A task that never calls ``next`` ends
    the chain; calling ``next`` after the last task does nothing.

    Example::

        step(
            lambda next: fetch(url, next),
            lambda next, body: parse(body, next),
            lambda next, doc: render(doc),
        )
    """
    pending = deque(tasks)

    def next_(*args: Any) -> None:
        if pending:
            pending.popleft()(next_, *args)

    next_()


def debounce_next_tick(runtime: Runtime, callback: Callable[[], Any]) -> Callable[[], None]:
    """Return a trigger that runs *callback* once on the loop's next tick.

    Triggers before that tick are coalesced. The trigger re-arms as soon as
    the scheduled run starts, so a trigger from inside *callback* schedules
    another run.
    """
    armed = False

    def run() -> None:
        nonlocal armed
        armed = False
        callback()

    def trigger() -> None:
        nonlocal armed
        if armed:
            return
        armed = True
        runtime.schedule(run)

    return trigger


async def sync_bridge(
    runtime: Runtime,
    runner: Callable[[Callable[..., None]], Any],
    timeout: float,
) -> None:
    """Call ``runner(done)`` and wait for ``done()`` or *timeout*.

    The runner is not cancelled on timeout; a late ``done()`` is ignored.
    Nothing signals which of the two happened: callers inspect the side
    effects of the runner.
    """
    finished = False

    def done(*_: Any) -> None:
        nonlocal finished
        finished = True

    runner(done)
    await runtime.wait(lambda: finished, timeout)
