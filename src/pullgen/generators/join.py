"""
Fan-in of several generators into one.

``join(a, b, c)`` returns a generator that yields values from any of its
children as soon as they are produced, and completes once every child has
completed. The children's ``next()`` calls run as concurrent tasks, so a child
that awaits I/O does not hold up its siblings.

Ordering: values are forwarded in the order the children produced them across
wake cycles; children that complete within the same cycle are forwarded in
child index order.

Failure: if a child raises, the join raises the same exception and stops.
Its siblings are not cancelled; call :meth:`Join.cancel_children` to ask them
to stop.

When the join stops early, because a child failed or the join itself was
cancelled, the children's in-flight ``next()`` calls are interrupted. A value a
child had already handed to the join but the join had not forwarded is pushed
back onto that child, and so is a failure nobody has seen yet: the child's own
next ``next()`` returns or raises it. No child value is lost.
"""

import asyncio
from enum import Enum
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

from pullgen.concurrency.atomic_counter import AtomicCounter
from pullgen.config.environment import Environment
from pullgen.config.logging_config import get_logger
from pullgen.generators.engine import GeneratorEngine
from pullgen.generators.handle import Handle
from pullgen.types import FrameStrategy

T = TypeVar("T")

log = get_logger(__name__)


class ChildStatus(str, Enum):
    NEXT = "next"
    AWAITING = "awaiting"
    RETURNED = "returned"
    DONE = "done"


class JoinedChild(Generic[T]):
    """
    One child of a join: its engine, where it is in the launch/report cycle,
    and the task running its current ``next()`` call.
    """

    __slots__ = ("index", "engine", "status", "task")

    def __init__(self, index: int, engine: GeneratorEngine[T, Any]):
        self.index = index
        self.engine = engine
        self.status = ChildStatus.NEXT
        self.task: Optional[asyncio.Task[Optional[T]]] = None

    async def next(self, counter: AtomicCounter, wake: Callable[[], None]) -> Optional[T]:
        try:
            return await self.engine.next()
        finally:
            self.status = ChildStatus.RETURNED
            # only the report that moves the counter off zero has to wake the join
            if counter.get_and_increment() == 0:
                wake()

    def __repr__(self) -> str:
        return f"JoinedChild({self.index}, {self.status.value})"


class Join(Generic[T]):
    """
    Generator body merging the output of ``children``.

    Args:
        children: The generators to merge. They should all yield the same type.
        strategy: How to keep per-child frames; defaults to the configured
            ``PULLGEN_JOIN_STRATEGY``. Both strategies produce the same values in
            the same order.
    """

    def __init__(
        self,
        children: Sequence[GeneratorEngine[T, Any]],
        strategy: Optional[FrameStrategy] = None,
    ):
        for child in children:
            if not isinstance(child, GeneratorEngine):
                raise TypeError(f"join children must be GeneratorEngine instances, got {child!r}")
        self.children = list(children)
        self.strategy = FrameStrategy(strategy) if strategy is not None else Environment.get_join_strategy()
        self.active = len(self.children)
        self._done = [False] * len(self.children)
        self._wakeup: Optional[asyncio.Future[None]] = None
        if self.strategy is FrameStrategy.EMBEDDED:
            self._slots: list[Optional[JoinedChild[T]]] = [
                JoinedChild(i, child) for i, child in enumerate(self.children)
            ]
        else:
            self._slots = [None] * len(self.children)

    def __repr__(self) -> str:
        return f"Join({len(self.children)} children, {self.strategy.value}, active={self.active})"

    @property
    def live_slots(self) -> int:
        """Number of child slots currently allocated."""
        return sum(1 for slot in self._slots if slot is not None)

    def cancel_children(self) -> None:
        """Request cancellation of every child that has not completed yet."""
        for index, child in enumerate(self.children):
            if not self._done[index]:
                child.cancel()

    async def generate(self, handle: Handle[T]) -> None:
        loop = asyncio.get_running_loop()
        counter = AtomicCounter()
        reported = 0

        try:
            while self.active > 0:
                # If there are no new reports, launch idle children and wait for one
                self._wakeup = loop.create_future()
                if counter.get_and_set(0) == reported:
                    self._launch(loop, counter)
                    await self._wakeup
                else:
                    log.debug("%r: reports arrived while draining, not suspending", self)
                self._wakeup = None
                reported = counter.value

                while True:
                    drained = 0
                    for index in range(len(self._slots)):
                        slot = self._slots[index]
                        if slot is None or slot.status is not ChildStatus.RETURNED:
                            continue
                        drained += 1
                        value = await self._collect(slot)
                        if value is None:
                            self._retire(slot)
                            continue
                        slot.status = ChildStatus.NEXT
                        if handle.cancelled:
                            # the value never left the join
                            slot.engine.push_back()
                        await handle.yield_(value)
                    # ...until we run out of reports
                    if drained == 0:
                        break
        finally:
            self._wakeup = None
            await self._release()

    async def _release(self) -> None:
        """Interrupt in-flight child calls and hand back what they already received."""
        in_flight = [slot for slot in self._slots if slot is not None and slot.task is not None]
        if not in_flight:
            return
        for slot in in_flight:
            assert slot.task is not None
            slot.task.cancel()
        outcomes = await asyncio.gather(*(slot.task for slot in in_flight), return_exceptions=True)
        for slot, outcome in zip(in_flight, outcomes):
            slot.task = None
            slot.status = ChildStatus.NEXT
            if outcome is not None and not isinstance(outcome, asyncio.CancelledError):
                slot.engine.push_back()
        log.debug("%r: released %d in-flight children", self, len(in_flight))

    def _launch(self, loop: asyncio.AbstractEventLoop, counter: AtomicCounter) -> None:
        launched = 0
        for index, child in enumerate(self.children):
            if self._done[index]:
                continue
            slot = self._slots[index]
            if slot is None:
                slot = JoinedChild(index, child)
                self._slots[index] = slot
            if slot.status is ChildStatus.NEXT:
                slot.status = ChildStatus.AWAITING
                slot.task = loop.create_task(slot.next(counter, self._wake))
                launched += 1
        if launched:
            log.debug("%r: launched %d children", self, launched)

    def _wake(self) -> None:
        wakeup = self._wakeup
        if wakeup is not None and not wakeup.done():
            wakeup.set_result(None)

    async def _collect(self, slot: JoinedChild[T]) -> Optional[T]:
        task = slot.task
        assert task is not None
        slot.task = None
        try:
            return await task
        except Exception as e:
            log.warning("%r: child %d failed, aborting merge: %s", self, slot.index, e)
            raise

    def _retire(self, slot: JoinedChild[T]) -> None:
        slot.status = ChildStatus.DONE
        self._done[slot.index] = True
        self.active -= 1
        log.debug("%r: child %d done", self, slot.index)
        if self.strategy is FrameStrategy.DYNAMIC:
            self._slots[slot.index] = None


def join(
    *children: GeneratorEngine[T, Any],
    strategy: Optional[FrameStrategy] = None,
) -> GeneratorEngine[T, None]:
    """
    Joins multiple generators into one that yields values as they come from
    any of them.
    """
    return GeneratorEngine(Join(children, strategy=strategy))
