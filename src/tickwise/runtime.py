"""Host runtime: timers, next-tick scheduling, clock and cooperative waits.

Every primitive in this package talks to the event loop through a
:class:`Runtime`. The runtime owns the timer registry, so all timers created
by throttles and timeout guards can be released together with
:meth:`Runtime.shutdown`.
"""

from __future__ import annotations

import asyncio
import atexit
import logging
import weakref
from typing import TYPE_CHECKING, Any

from tickwise.config import RuntimeConfig

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class Timer:
    """One-shot or repeating timer on top of ``loop.call_later``.

    A timer can be started and stopped any number of times. Starting it
    again replaces the pending fire. Once closed it cannot be restarted.
    """

    __slots__ = ("__weakref__", "_closed", "_handle", "_runtime")

    def __init__(self, runtime: Runtime) -> None:
        self._runtime = runtime
        self._handle: asyncio.TimerHandle | None = None
        self._closed = False

    @property
    def active(self) -> bool:
        """Whether a fire is currently pending."""
        return self._handle is not None

    def start(self, delay: float, callback: Callable[[], Any], repeat: bool = False) -> None:
        """Arm the timer to call *callback* after *delay* seconds.

        With ``repeat=True`` the timer re-arms itself with the same delay
        after every fire until stopped.
        """
        if self._closed:
            raise RuntimeError("Timer is closed")
        if delay < 0:
            raise ValueError(f"delay must be non-negative, got {delay}")

        self.stop()
        loop = self._runtime.loop

        def _fire() -> None:
            self._handle = loop.call_later(delay, _fire) if repeat else None
            callback()

        self._handle = loop.call_later(delay, _fire)

    def stop(self) -> None:
        """Cancel the pending fire, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def close(self) -> None:
        """Stop the timer and release it for good."""
        if self._closed:
            return
        self.stop()
        self._closed = True

    def is_closing(self) -> bool:
        return self._closed

    def __repr__(self) -> str:
        return f"Timer(active={self.active}, closed={self._closed})"


class Runtime:
    """Explicit owner of the event-loop collaborators used by the primitives.

    Args:
        config: Runtime tunables. Defaults to :class:`RuntimeConfig`.
        loop: Event loop to bind to. When omitted, the running loop is
              picked up on first use.

    Example::

        async with Runtime() as runtime:
            refresh = Throttle(runtime, redraw, window=0.2)
            refresh("a")
            refresh("b")
            await refresh.sync()
    """

    __slots__ = ("_closed", "_config", "_exit_hook", "_loop", "_timers")

    def __init__(
        self,
        *,
        config: RuntimeConfig | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._config = config or RuntimeConfig()
        self._loop = loop
        self._timers: weakref.WeakSet[Timer] = weakref.WeakSet()
        self._closed = False
        self._exit_hook = False

    @property
    def config(self) -> RuntimeConfig:
        return self._config

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def live_timers(self) -> int:
        """Number of tracked timers that have not been closed yet."""
        return sum(1 for timer in list(self._timers) if not timer.is_closing())

    def create_timer(self) -> Timer:
        """Create a timer tracked by this runtime's registry."""
        self._ensure_open()
        timer = Timer(self)
        self._timers.add(timer)
        return timer

    def schedule(self, fn: Callable[..., Any], *args: Any) -> None:
        """Run *fn* once on the loop's next tick."""
        self.loop.call_soon(fn, *args)

    def now(self) -> float:
        """Monotonic loop time in seconds."""
        return self.loop.time()

    async def wait(
        self,
        predicate: Callable[[], bool],
        timeout: float,
        interval: float | None = None,
    ) -> bool:
        """Poll *predicate* while letting the loop run, until true or *timeout*.

        Returns whether the predicate became true. Must not be awaited from a
        context the predicate depends on, or it can only time out.
        """
        interval = interval or self._config.poll_interval
        deadline = self.now() + timeout
        while not predicate():
            remaining = deadline - self.now()
            if remaining <= 0:
                return False
            await asyncio.sleep(min(interval, remaining))
        return True

    def shutdown(self) -> None:
        """Stop and close every tracked timer. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True

        timers = list(self._timers)
        logger.debug("Runtime shutdown: closing %d timer(s)", len(timers))
        for timer in timers:
            if not timer.is_closing():
                timer.close()
        self._timers.clear()

    def install_exit_hook(self) -> None:
        """Register :meth:`shutdown` to run at interpreter exit (idempotent)."""
        if self._exit_hook:
            return
        atexit.register(self.shutdown)
        self._exit_hook = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Runtime is shut down")

    def __enter__(self) -> Runtime:
        return self

    def __exit__(self, *_: Any) -> None:
        self.shutdown()

    async def __aenter__(self) -> Runtime:
        self._loop = self._loop or asyncio.get_running_loop()
        return self

    async def __aexit__(self, *_: Any) -> None:
        self.shutdown()

    def __repr__(self) -> str:
        return f"Runtime(live_timers={self.live_timers}, closed={self._closed})"
