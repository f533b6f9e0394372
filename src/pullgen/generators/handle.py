"""
The hand-off cell shared by a generator body and its engine.

One value crosses the handle per ``next()`` call. The body parks on a *resume*
future after storing a value; the consumer parks on a *report* future until
the body yields or completes. Both futures belong to the running event loop,
and each side only ever resolves the future the other side is waiting on.
"""

import asyncio
from enum import Enum
from typing import Any, Generic, NoReturn, Optional, TypeVar

from pullgen.concurrency.cancellation import CancellationToken
from pullgen.errors import GeneratorCancelled, GeneratorFinished

T = TypeVar("T")


class HandleState(str, Enum):
    WORKING = "working"
    YIELDED = "yielded"


class Handle(Generic[T]):
    """
    Generator handle, passed to a body's ``generate(handle)``.

    The body produces values with ``await handle.yield_(value)`` and may end
    early with ``handle.finish(result)``. Both are cancellation checkpoints.
    """

    def __init__(self) -> None:
        self.state = HandleState.WORKING
        self.token = CancellationToken()
        self._value: Optional[T] = None
        self._delivered = True
        self._resume: Optional[asyncio.Future[None]] = None
        self._report: Optional[asyncio.Future[None]] = None
        self._finished = False
        self._finish_result: Any = None

    @property
    def cancelled(self) -> bool:
        return self.token.is_cancelled()

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def finish_result(self) -> Any:
        return self._finish_result

    async def yield_(self, value: T) -> None:
        """
        Yields a value to the consumer and suspends until the next ``next()``.

        Raises:
            GeneratorCancelled: if the generator was cancelled before the value
                could be delivered, or while the body was suspended.
            TypeError: if ``value`` is None, which is reserved for end-of-stream.
        """
        if self._finished:
            raise GeneratorFinished(self._finish_result)
        self.token.raise_if_cancelled(GeneratorCancelled)
        if value is None:
            raise TypeError("generators cannot yield None; it marks the end of the stream")

        resume = asyncio.get_running_loop().create_future()
        self._value = value
        self._delivered = False
        self.state = HandleState.YIELDED
        self._resume = resume
        self._report_to_consumer()
        try:
            await resume
        finally:
            self._resume = None
            self._value = None
            self.state = HandleState.WORKING
        self.token.raise_if_cancelled(GeneratorCancelled)

    def finish(self, result: Any = None) -> NoReturn:
        """
        Ends the generator immediately with ``result``.

        The result is recorded before anything else happens and cannot be
        changed afterwards. The body is unwound by raising
        :class:`GeneratorFinished`; anything it does while unwinding, including
        raising, is ignored by the engine. Release resources you own *before*
        calling ``finish``: cleanup on this path is not guaranteed to be
        observed by anyone.

        Raises:
            GeneratorCancelled: if the generator was cancelled; nothing is recorded.
            GeneratorFinished: always, otherwise.
        """
        if self._finished:
            raise GeneratorFinished(self._finish_result)
        self.token.raise_if_cancelled(GeneratorCancelled)
        self._finished = True
        self._finish_result = result
        raise GeneratorFinished(result)

    def cancel(self) -> None:
        self.token.cancel()

    # -- engine side ---------------------------------------------------------

    @property
    def has_pending(self) -> bool:
        """A value was yielded that no consumer has taken yet."""
        return self.state is HandleState.YIELDED and not self._delivered

    @property
    def producer_suspended(self) -> bool:
        return self._resume is not None and not self._resume.done()

    def expect_report(self, loop: asyncio.AbstractEventLoop) -> "asyncio.Future[None]":
        """Arm the future the consumer waits on until the body yields or completes."""
        self._report = loop.create_future()
        return self._report

    def resume_producer(self) -> None:
        if self._resume is not None and not self._resume.done():
            self._resume.set_result(None)

    def take(self) -> T:
        if not self.has_pending:
            raise RuntimeError("no value pending on this handle")
        self._delivered = True
        return self._value  # type: ignore[return-value]

    def untake(self) -> bool:
        """Mark the value taken last as pending again, if the body still holds it."""
        if self.state is HandleState.YIELDED and self._delivered and self.producer_suspended:
            self._delivered = False
            return True
        return False

    def report_completion(self) -> None:
        self._report_to_consumer()

    def _report_to_consumer(self) -> None:
        report = self._report
        if report is not None and not report.done():
            report.set_result(None)
