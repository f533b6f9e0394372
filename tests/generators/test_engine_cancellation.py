"""Tests for cooperative cancellation of generators."""

import asyncio

import pytest

from pullgen.concurrency import CancellationError
from pullgen.generators import GeneratorCancelled, GeneratorEngine, Handle, State


class Cooperative:
    def __init__(self):
        self.drained = False
        self.cancelled = False

    async def generate(self, handle: Handle[int]) -> int:
        try:
            await handle.yield_(0)
            await handle.yield_(1)
            await handle.yield_(2)
            self.drained = True
            return 3
        except GeneratorCancelled:
            self.cancelled = True
            raise


class Uncooperative:
    def __init__(self):
        self.drained = False
        self.ignored_termination_0 = False
        self.ignored_termination_1 = False

    async def generate(self, handle: Handle[int]) -> None:
        try:
            await handle.yield_(0)
        except GeneratorCancelled:
            self.ignored_termination_0 = True
        try:
            await handle.yield_(1)
        except GeneratorCancelled:
            self.ignored_termination_1 = True
        self.drained = True


class TestCancel:
    """A body that lets GeneratorCancelled escape."""

    @pytest.mark.asyncio
    async def test_cancel_before_first_next(self):
        """No values are delivered and the cancellation cleanup runs."""
        body = Cooperative()
        gen = GeneratorEngine(body)
        gen.cancel()

        assert await gen.next() is None
        assert gen.state == State.CANCELLED
        assert not body.drained
        assert body.cancelled

    @pytest.mark.asyncio
    async def test_cancel_after_first_value(self):
        """Exactly the values delivered before cancel() are seen."""
        body = Cooperative()
        gen = GeneratorEngine(body)

        assert await gen.next() == 0
        gen.cancel()
        assert await gen.next() is None
        assert gen.state == State.CANCELLED
        assert not body.drained
        assert body.cancelled

    @pytest.mark.asyncio
    @pytest.mark.parametrize("k", [1, 2, 3])
    async def test_cancel_after_k_values(self, k: int):
        """Cancelling after k values delivers exactly k."""

        async def body(handle: Handle[int]) -> None:
            for i in range(10):
                await handle.yield_(i)

        gen = GeneratorEngine(body)
        delivered = [await gen.next() for _ in range(k)]
        gen.cancel()

        assert delivered == list(range(k))
        assert await gen.next() is None
        assert gen.state == State.CANCELLED
        assert await gen.next() is None

    @pytest.mark.asyncio
    async def test_cancel_is_idempotent(self):
        """Repeated cancel() calls are harmless."""
        gen = GeneratorEngine(Cooperative())
        gen.cancel()
        gen.cancel()

        assert await gen.next() is None
        gen.cancel()
        assert gen.state == State.CANCELLED

    @pytest.mark.asyncio
    async def test_cancel_after_return_keeps_returned(self):
        """Cancelling a finished generator changes nothing."""
        gen = GeneratorEngine(Cooperative())
        assert await gen.drain() == 3

        gen.cancel()
        assert gen.state == State.RETURNED
        assert gen.return_value == 3
        assert await gen.next() is None

    @pytest.mark.asyncio
    async def test_cancelled_is_not_an_error(self):
        """drain() of a cancelled generator returns None instead of raising."""
        gen = GeneratorEngine(Cooperative())
        assert await gen.next() == 0
        gen.cancel()

        assert await gen.drain() is None
        assert gen.state.error is None

    @pytest.mark.asyncio
    async def test_cancel_does_not_force_progress(self):
        """cancel() only sets a flag; the body notices at its next checkpoint."""
        steps = []

        async def body(handle: Handle[int]) -> None:
            await handle.yield_(1)
            steps.append("resumed")
            await handle.yield_(2)
            steps.append("unreachable")

        gen = GeneratorEngine(body)
        assert await gen.next() == 1
        gen.cancel()
        await asyncio.sleep(0.01)
        assert steps == []
        assert gen.state == State.STARTED

        assert await gen.next() is None
        assert steps == []
        assert gen.state == State.CANCELLED

    @pytest.mark.asyncio
    async def test_body_observes_flag_without_yielding(self):
        """A body can poll the cancellation flag itself."""

        async def body(handle: Handle[int]) -> str:
            await handle.yield_(1)
            if handle.cancelled:
                return "stopped early"
            await handle.yield_(2)
            return "finished"

        gen = GeneratorEngine(body)
        assert await gen.next() == 1
        gen.cancel()

        # resuming re-checks the flag, so the poll is never reached
        assert await gen.next() is None
        assert gen.state == State.CANCELLED

    @pytest.mark.asyncio
    async def test_finish_is_a_checkpoint(self):
        """finish() raises GeneratorCancelled when cancellation was requested."""
        cleanup = []

        async def body(handle: Handle[int]) -> int:
            try:
                handle.finish(10)
            except GeneratorCancelled:
                cleanup.append("cancelled")
                raise

        gen = GeneratorEngine(body)
        gen.cancel()

        assert await gen.next() is None
        assert gen.state == State.CANCELLED
        assert gen.return_value is None
        assert cleanup == ["cancelled"]

    @pytest.mark.asyncio
    async def test_aclose(self):
        """aclose() cancels and drives the generator to its end."""
        body = Cooperative()
        gen = GeneratorEngine(body)
        assert await gen.next() == 0

        assert await gen.aclose() is None
        assert gen.state == State.CANCELLED
        assert body.cancelled

    def test_generator_cancelled_is_a_cancellation_error(self):
        """GeneratorCancelled can be caught as the generic CancellationError."""
        assert issubclass(GeneratorCancelled, CancellationError)


class TestUncooperativeCancel:
    """A body that swallows GeneratorCancelled."""

    @pytest.mark.asyncio
    async def test_cancel_before_first_next(self):
        """The body runs to completion without delivering anything."""
        body = Uncooperative()
        gen = GeneratorEngine(body)
        gen.cancel()

        assert await gen.next() is None
        assert gen.state == State.RETURNED
        assert body.drained
        assert body.ignored_termination_0
        assert body.ignored_termination_1

    @pytest.mark.asyncio
    async def test_cancel_after_first_value(self):
        """The body completes on the next drive."""
        body = Uncooperative()
        gen = GeneratorEngine(body)

        assert await gen.next() == 0
        gen.cancel()
        assert await gen.next() is None
        assert gen.state == State.RETURNED
        assert body.drained
        assert body.ignored_termination_0
        assert body.ignored_termination_1

    @pytest.mark.asyncio
    async def test_looping_body_does_not_hang(self):
        """A body that keeps yielding after swallowing the signal still terminates."""
        skipped = 0

        async def body(handle: Handle[int]) -> str:
            nonlocal skipped
            for i in range(5):
                try:
                    await handle.yield_(i)
                except GeneratorCancelled:
                    skipped += 1
            return "done"

        gen = GeneratorEngine(body)
        assert await gen.next() == 0
        assert await gen.next() == 1
        gen.cancel()

        result = await asyncio.wait_for(gen.drain(), timeout=1.0)
        assert result == "done"
        assert skipped == 4
        assert gen.state == State.RETURNED
