"""One-shot and staleness guards for callbacks."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from tickwise.runtime import Runtime

logger = logging.getLogger(__name__)


class TimeoutGuard:
    """Callback that fires *fn* exactly once: when called, or at the deadline.

    Whichever comes first wins. An explicit call forwards its arguments to
    *fn*; deadline expiry calls *fn* with none. Every later call is a no-op.

    Args:
        runtime: Runtime supplying the deadline timer.
        fn: Callback to protect.
        deadline: Seconds until *fn* fires on its own.

    Example::

        done = TimeoutGuard(runtime, on_items, deadline=0.5)
        source.complete(done)  # on_items(items), or on_items() after 0.5s
    """

    __slots__ = ("_fired", "_fn", "_timer")

    def __init__(self, runtime: Runtime, fn: Callable[..., Any], deadline: float) -> None:
        if deadline < 0:
            raise ValueError(f"deadline must be non-negative, got {deadline}")

        self._fn = fn
        self._fired = False
        self._timer = runtime.create_timer()
        self._timer.start(deadline, self)

    @property
    def fired(self) -> bool:
        return self._fired

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        if self._fired:
            return
        self._fired = True
        self._timer.stop()
        self._timer.close()
        self._fn(*args, **kwargs)

    def __repr__(self) -> str:
        return f"TimeoutGuard(fired={self._fired})"


class Dedup:
    """Issues callback wrappers of which only the newest one is live.

    Each :meth:`issue` bumps the generation and invalidates every wrapper
    handed out before it. Calling an invalidated wrapper does nothing, which
    drops responses to requests that a newer request has superseded.

    Example::

        dedup = Dedup()

        def on_keystroke(text: str) -> None:
            backend.complete(text, dedup(show_items))
    """

    __slots__ = ("_generation",)

    def __init__(self) -> None:
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def issue(self, callback: Callable[..., Any]) -> Callable[..., Any]:
        """Return a wrapper of *callback* that is live until the next issue."""
        self._generation += 1
        current = self._generation

        def wrapper(*args: Any, **kwargs: Any) -> Any:
            if current != self._generation:
                logger.debug("Dropping stale callback (generation %d, current %d)", current, self._generation)
                return None
            return callback(*args, **kwargs)

        return wrapper

    __call__ = issue

    def __repr__(self) -> str:
        return f"Dedup(generation={self._generation})"
