"""Burst-anchored trailing throttle."""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING, Any, Generic, ParamSpec

if TYPE_CHECKING:
    from collections.abc import Callable

    from tickwise.runtime import Runtime


P = ParamSpec("P")


class Throttle(Generic[P]):
    """Trailing-edge throttle anchored to the first call of a burst.

    How it works:
        - The first call of a burst records ``burst_start``.
        - Every call re-arms the timer so that it fires ``window`` seconds
          after ``burst_start`` (never sooner than ``config.min_delay``).
        - When the timer fires, ``action`` runs once with the arguments of
          the most recent call and the burst ends.

    Unlike a plain debounce, later calls do not push the deadline further
    out: the window is measured from the start of the burst.

    Example::

        window=1.0s

        t=0.0s refresh("a")   -> burst starts, fire at t=1.0s
        t=0.4s refresh("b")   -> fire still at t=1.0s
        t=1.0s timer expires  -> action("b")

    Args:
        runtime: Runtime supplying the timer and clock.
        action: Callable to throttle.
        window: Window length in seconds. Must be positive.
    """

    def __init__(self, runtime: Runtime, action: Callable[P, Any], window: float) -> None:
        if window <= 0:
            raise ValueError(f"window must be positive, got {window}")

        self._runtime = runtime
        self._timer = runtime.create_timer()
        self._args: tuple[Any, ...] = ()
        self._kwargs: dict[str, Any] = {}
        self.action = action
        self.window = window
        self.burst_start: float | None = None
        self.running = False

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> None:
        """Request a trailing execution of ``action`` with these arguments."""
        self._args = args
        self._kwargs = kwargs

        now = self._runtime.now()
        if self.burst_start is None:
            self.burst_start = now

        self.running = True
        delay = max(self._runtime.config.min_delay, self.window - (now - self.burst_start))
        self._timer.start(delay, self._fire)

    def stop(self) -> None:
        """Cancel the pending execution without running ``action``."""
        self.burst_start = None
        self.running = False
        self._timer.stop()

    async def sync(self, timeout: float | None = None) -> None:
        """Wait until the pending execution has run, or *timeout* elapses."""
        if not self.running:
            return
        await self._runtime.wait(
            lambda: not self.running,
            timeout if timeout is not None else self._runtime.config.sync_timeout,
        )

    def _fire(self) -> None:
        self.burst_start = None
        args, kwargs = self._args, self._kwargs
        self._args, self._kwargs = (), {}
        try:
            self.action(*args, **kwargs)
        finally:
            # The action may have re-armed the timer by calling the handle.
            self.running = self._timer.active

    def __repr__(self) -> str:
        return f"Throttle(window={self.window}, running={self.running})"


def throttle(window: float, *, runtime: Runtime) -> Callable[[Callable[P, Any]], Throttle[P]]:
    """Decorator that turns a function into a :class:`Throttle`.

    The decorated name becomes the throttle handle, so ``stop()`` and
    ``sync()`` are available on it directly.

    Examples:
    ```python
        @throttle(0.2, runtime=runtime)
        def redraw(rows: list[str]) -> None:
            view.render(rows)

        redraw(first)
        redraw(second)  # only this one is rendered
        await redraw.sync()
    ```
    """

    def decorator(fn: Callable[P, Any]) -> Throttle[P]:
        handle = Throttle(runtime, fn, window)
        functools.update_wrapper(handle, fn)
        return handle

    return decorator
