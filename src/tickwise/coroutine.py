"""Generator-driven bridge from callback-style calls to linear code.

A wrapped task is a generator function. Each ``yield`` hands the driver a
*suspension*: a callable that takes a resume continuation and arranges for
it to be called later. The driver resumes the generator with whatever the
continuation receives.

Example::

    @wrap
    def load(path):
        stat = yield suspend(fs_stat, path)
        if stat is None:
            return None
        data = yield suspend(fs_read, path, stat.size)
        yield yield_schedule(runtime)  # let the loop breathe
        return parse(data)

    routine = load("config.toml")
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from enum import StrEnum
from typing import TYPE_CHECKING, Any, ParamSpec

if TYPE_CHECKING:
    from collections.abc import Callable, Generator

    from tickwise.runtime import Runtime

    Suspension = Callable[[Callable[..., None]], Any]

logger = logging.getLogger(__name__)

P = ParamSpec("P")


class RoutineStatus(StrEnum):
    """Lifecycle of a :class:`Routine`.

    SUSPENDED: Waiting for its continuation to be called.
    RUNNING:   Executing between two suspension points.
    DONE:      Returned or raised; further resumes are ignored.
    """

    SUSPENDED = "suspended"
    RUNNING = "running"
    DONE = "done"


def _completion_value(values: tuple[Any, ...]) -> Any:
    if not values:
        return None
    if len(values) == 1:
        return values[0]
    return values


def suspend(async_fn: Callable[..., Any], *args: Any) -> Suspension:
    """Suspension calling ``async_fn(*args, completion)``.

    The routine resumes with the completion's argument, ``None`` when it is
    called without arguments, or a tuple when it receives several.
    """

    def start(resume: Callable[..., None]) -> None:
        async_fn(*args, resume)

    return start


def yield_schedule(runtime: Runtime) -> Suspension:
    """Suspension that resumes with ``None`` on the loop's next tick."""

    def start(resume: Callable[..., None]) -> None:
        runtime.schedule(resume)

    return start


class _Continuation:
    """One-shot resume callback for a single suspension point.

    A completion that arrives while the suspension is still starting is
    stored and sent by the driver loop, so synchronous completions do not
    grow the stack.
    """

    __slots__ = ("_routine", "inline", "ready", "used", "value")

    def __init__(self, routine: Routine) -> None:
        self._routine = routine
        self.inline = True
        self.ready = False
        self.used = False
        self.value: Any = None

    def __call__(self, *values: Any) -> None:
        if self.used:
            logger.debug("Ignoring duplicate completion for %r", self._routine)
            return
        self.used = True
        if self.inline:
            self.value = _completion_value(values)
            self.ready = True
            return
        self._routine._step(_completion_value(values))


class Routine:
    """Driver around one run of a wrapped generator.

    Attributes:
        status: Current :class:`RoutineStatus`.
        result: The generator's return value once it has finished.
        error: The exception that ended the generator, if any.
    """

    __slots__ = ("_gen", "error", "result", "status")

    def __init__(self, gen: Generator[Suspension, Any, Any]) -> None:
        self._gen = gen
        self.status = RoutineStatus.SUSPENDED
        self.result: Any = None
        self.error: BaseException | None = None

    @property
    def done(self) -> bool:
        return self.status is RoutineStatus.DONE

    def _step(self, value: Any = None, error: BaseException | None = None) -> None:
        if self.status is not RoutineStatus.SUSPENDED:
            return

        while True:
            self.status = RoutineStatus.RUNNING
            try:
                if error is not None:
                    suspension = self._gen.throw(error)
                else:
                    suspension = self._gen.send(value)
            except StopIteration as stop:
                self.status = RoutineStatus.DONE
                self.result = stop.value
                return
            except BaseException as err:
                self.status = RoutineStatus.DONE
                self.error = err
                raise

            self.status = RoutineStatus.SUSPENDED
            error = None
            if not callable(suspension):
                error = TypeError(f"routine yielded a non-callable: {suspension!r}")
                continue

            continuation = _Continuation(self)
            try:
                suspension(continuation)
            except Exception as err:
                if continuation.used:
                    raise
                # Failed before completing: deliver the error at the yield point.
                continuation.used = True
                error = err
                continue
            finally:
                continuation.inline = False

            if not continuation.ready:
                return
            value = continuation.value

    def __repr__(self) -> str:
        return f"Routine(status={self.status.value})"


def wrap(task: Callable[P, Generator[Suspension, Any, Any]]) -> Callable[P, Routine]:
    """Turn generator function *task* into an entrypoint that starts a :class:`Routine`.

    Each entrypoint call runs ``task(*args)`` up to its first suspension and
    returns the routine. Errors raised by the task propagate to whoever
    resumed it: the entrypoint's caller for the first segment, the completing
    callback afterwards.
    """
    if not inspect.isgeneratorfunction(task):
        raise TypeError("wrap only supports generator functions.")

    @functools.wraps(task)
    def entrypoint(*args: P.args, **kwargs: P.kwargs) -> Routine:
        routine = Routine(task(*args, **kwargs))
        routine._step()
        return routine

    return entrypoint


def as_future(async_fn: Callable[..., Any], *args: Any) -> asyncio.Future[Any]:
    """Call ``async_fn(*args, completion)`` and return a future of its result.

    Uses the same value convention as :func:`suspend`. Must be called from
    inside a running event loop.
    """
    future = asyncio.get_running_loop().create_future()

    def completion(*values: Any) -> None:
        if future.done():
            logger.debug("Ignoring duplicate completion for %s", getattr(async_fn, "__name__", async_fn))
            return
        future.set_result(_completion_value(values))

    async_fn(*args, completion)
    return future
