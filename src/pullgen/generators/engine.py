"""
Pull-based generator engine.

A body is written as straight-line async code that hands values out through
its :class:`~pullgen.generators.handle.Handle`:

    class Countdown:
        def __init__(self, n: int):
            self.n = n

        async def generate(self, handle: Handle[int]) -> str:
            while self.n > 0:
                await handle.yield_(self.n)
                self.n -= 1
            return "liftoff"

    gen = GeneratorEngine(Countdown(3))
    assert await gen.next() == 3
    assert await gen.drain() == "liftoff"

The engine runs the body as a task on the running event loop, but the body
only makes progress between a ``next()`` call and the following yield, so
values are produced on demand.
"""

import asyncio
import inspect
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Generic,
    Optional,
    Protocol,
    TypeVar,
    Union,
    runtime_checkable,
)

from pullgen.config.logging_config import get_logger
from pullgen.errors import GeneratorCancelled, GeneratorFinished
from pullgen.generators.handle import Handle
from pullgen.generators.state import GeneratorState, State

T = TypeVar("T")
R = TypeVar("R")

log = get_logger(__name__)


@runtime_checkable
class GeneratorBody(Protocol[T, R]):
    """Anything with an ``async def generate(self, handle)`` method."""

    def generate(self, handle: Handle[T]) -> Awaitable[R]: ...


BodyFunction = Callable[[Handle[T]], Awaitable[R]]


class _FunctionBody(Generic[T, R]):
    def __init__(self, fn: BodyFunction):
        self.fn = fn

    def generate(self, handle: Handle[T]) -> Awaitable[R]:
        return self.fn(handle)

    def __repr__(self) -> str:
        return f"<body {getattr(self.fn, '__qualname__', self.fn)!r}>"


def _as_body(body: Any) -> GeneratorBody:
    if inspect.iscoroutinefunction(body):
        return _FunctionBody(body)
    generate = getattr(body, "generate", None)
    if generate is not None and callable(generate):
        return body
    raise TypeError(
        f"{body!r} is not a generator body: expected an object with an async "
        "generate(handle) method or an async function taking the handle"
    )


class GeneratorEngine(Generic[T, R]):
    """
    Drives one body and exposes its values through ``next()``.

    Single consumer: do not await ``next()`` on the same engine from two
    tasks at once.

    Attributes:
        body: The body object (for function bodies, a thin wrapper around it).
        handle: The handle shared with the body.
    """

    def __init__(self, body: Union[GeneratorBody[T, R], BodyFunction]):
        self.body = _as_body(body)
        self.handle: Handle[T] = Handle()
        self._state: GeneratorState = GeneratorState.initialized()
        self._task: Optional[asyncio.Task[None]] = None
        self._error_reported = False

    def __repr__(self) -> str:
        return f"GeneratorEngine({self.body!r}, state={self._state.kind.value})"

    @property
    def state(self) -> GeneratorState:
        return self._state

    @property
    def is_terminal(self) -> bool:
        return self._state.is_terminal

    @property
    def return_value(self) -> Any:
        """The body's result once ``RETURNED``, otherwise None."""
        return self._state.result

    async def next(self) -> Optional[T]:
        """
        Returns the next yielded value, or None if the generator returned or
        was cancelled.

        ``next()`` propagates exceptions raised by the body, once. Every call
        after the generator reached a terminal state returns None.
        """
        if self._state.is_terminal:
            return self._observe_terminal()

        loop = asyncio.get_running_loop()
        if self._state.kind is State.INITIALIZED:
            self._state = GeneratorState.started()
            log.debug("Starting %r", self.body)
            report = self.handle.expect_report(loop)
            self._task = loop.create_task(self._drive())
        elif self.handle.has_pending:
            # an earlier next() was interrupted after the body yielded
            return self.handle.take()
        else:
            report = self.handle.expect_report(loop)
            self.handle.resume_producer()

        await report

        if self._state.kind is State.STARTED:
            return self.handle.take()
        return self._observe_terminal()

    async def drain(self) -> Optional[R]:
        """
        Drains the generator until it is done and returns its result.

        Returns None for a cancelled generator. Raises the body's exception if
        it failed, even when an earlier ``next()`` already reported it.
        """
        while await self.next() is not None:
            pass
        if self._state.kind is State.ERROR:
            assert self._state.error is not None
            raise self._state.error
        return self._state.result

    def cancel(self) -> None:
        """
        Cancels the generator.

        It won't yield any more values: the body receives GeneratorCancelled at
        its next yield or finish and can run its cleanup. Until then it may keep
        working, for example while it awaits other coroutines.

        The body must cooperate. An uncooperative body can catch
        GeneratorCancelled and refuse to stop; it then runs to completion the
        next time it is driven, without delivering further values.
        """
        if not self.handle.cancelled:
            log.debug("Cancellation requested for %r", self.body)
        self.handle.cancel()

    def push_back(self) -> bool:
        """
        Hands the outcome of the last ``next()`` back, for a caller that
        received it but could not pass it on.

        A value becomes pending again and the following ``next()`` returns it;
        a failure is raised again by the following ``next()``. Returns False
        when there is nothing to restore.
        """
        if self._state.kind is State.ERROR:
            restored = self._error_reported
            self._error_reported = False
            return restored
        return self.handle.untake()

    async def aclose(self) -> Optional[R]:
        """Cancel, then drive the body until it reaches a terminal state."""
        self.cancel()
        return await self.drain()

    def __aiter__(self) -> AsyncIterator[T]:
        return self

    async def __anext__(self) -> T:
        value = await self.next()
        if value is None:
            raise StopAsyncIteration
        return value

    def _observe_terminal(self) -> None:
        if self._state.kind is State.ERROR and not self._error_reported:
            self._error_reported = True
            assert self._state.error is not None
            raise self._state.error
        return None

    async def _drive(self) -> None:
        try:
            result = await self.body.generate(self.handle)
        except GeneratorFinished as finished:
            self._finish(finished.result)
        except GeneratorCancelled:
            if self.handle.finished:
                self._finish(self.handle.finish_result)
            else:
                self._set_terminal(GeneratorState.cancelled())
        except asyncio.CancelledError:
            self._set_terminal(GeneratorState.cancelled())
            raise
        except Exception as e:
            if self.handle.finished:
                log.warning(
                    "Ignoring %s raised by %r after finish()", type(e).__name__, self.body
                )
                self._finish(self.handle.finish_result)
            else:
                log.debug("Body %r failed: %s", self.body, e)
                self._set_terminal(GeneratorState.failed(e))
        except BaseException as e:
            self._set_terminal(GeneratorState.failed(e))
            raise
        else:
            if self.handle.finished:
                self._finish(self.handle.finish_result)
            else:
                self._set_terminal(GeneratorState.returned(result))
        finally:
            self._task = None
            self.handle.report_completion()

    def _finish(self, result: Any) -> None:
        self._set_terminal(GeneratorState.returned(result))

    def _set_terminal(self, state: GeneratorState) -> None:
        self._state = state
        log.debug("%r reached %s", self.body, state.kind.value)


def generator(body: Union[GeneratorBody[T, R], BodyFunction]) -> GeneratorEngine[T, R]:
    """Shorthand for ``GeneratorEngine(body)``."""
    return GeneratorEngine(body)
