"""tickwise — async-coordination primitives for a single-threaded event loop.

Throttle, debounce, deduplicate and sequence callback-heavy work without
blocking the loop.

Basic usage:

    from tickwise import Runtime, Throttle

    async with Runtime() as runtime:
        refresh = Throttle(runtime, redraw, window=0.2)
        refresh("a")
        refresh("b")      # redraw("b") runs once, 0.2s after the first call
        await refresh.sync()

Coroutine bridge:

    from tickwise import suspend, wrap

    @wrap
    def lookup(key):
        value = yield suspend(cache.get, key)
        print(value)
"""

from tickwise.config import RuntimeConfig
from tickwise.coroutine import Routine, RoutineStatus, as_future, suspend, wrap, yield_schedule
from tickwise.flow import debounce_next_tick, step, sync_bridge
from tickwise.guards import Dedup, TimeoutGuard
from tickwise.runtime import Runtime, Timer
from tickwise.throttle import Throttle, throttle

__all__ = [
    "Dedup",
    "Routine",
    "RoutineStatus",
    "Runtime",
    "RuntimeConfig",
    "Throttle",
    "TimeoutGuard",
    "Timer",
    "as_future",
    "debounce_next_tick",
    "step",
    "suspend",
    "sync_bridge",
    "throttle",
    "wrap",
    "yield_schedule",
]

__version__ = "0.1.0"
