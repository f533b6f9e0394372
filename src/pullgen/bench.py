"""
Micro-benchmarks for generators.

Each benchmark first checks that the generator under test behaves as expected
and then times ``repeat`` runs with ``time.perf_counter``.
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel, Field

from pullgen.config.logging_config import get_logger
from pullgen.generators.engine import GeneratorEngine
from pullgen.generators.handle import Handle
from pullgen.generators.join import join
from pullgen.types import FrameStrategy

log = get_logger(__name__)

Work = Callable[[int], Awaitable[None]]


class BenchResult(BaseModel):
    name: str
    variant: str
    runs: int = Field(ge=1)
    total_seconds: float
    values_per_run: int

    @property
    def mean_us(self) -> float:
        return self.total_seconds / self.runs * 1e6

    @property
    def values_per_second(self) -> float:
        if self.total_seconds == 0:
            return 0.0
        return self.runs * self.values_per_run / self.total_seconds


class Countdown:
    """Yields ``1`` ``n`` times, then returns 3."""

    def __init__(self, n: int):
        self.n = n

    async def generate(self, handle: Handle[int]) -> int:
        while self.n > 0:
            await handle.yield_(1)
            self.n -= 1
        return 3


class Triple:
    async def generate(self, handle: Handle[int]) -> int:
        await handle.yield_(0)
        await handle.yield_(1)
        await handle.yield_(2)
        return 3


async def no_work(_: int) -> None:
    pass


async def busy_work(_: int) -> None:
    await asyncio.sleep(0)


async def _callback_triple(work: Work) -> int:
    await work(0)
    await work(1)
    await work(2)
    return 3


async def _timed(runs: int, once: Callable[[], Awaitable[None]]) -> float:
    start = time.perf_counter()
    for _ in range(runs):
        await once()
    return time.perf_counter() - start


async def bench_drain(sizes: list[int], repeat: int) -> list[BenchResult]:
    """Cost of draining a generator of each length in ``sizes``."""
    check = GeneratorEngine(Countdown(1))
    if await check.drain() != 3:
        raise RuntimeError("Countdown generator did not return 3")

    results = []
    for n in sizes:

        async def once(n: int = n) -> None:
            gen = GeneratorEngine(Countdown(n))
            if await gen.drain() != 3:
                raise RuntimeError(f"Countdown({n}) did not return 3")

        total = await _timed(repeat, once)
        results.append(
            BenchResult(name="drain", variant=str(n), runs=repeat, total_seconds=total, values_per_run=n)
        )
        log.debug("drain n=%d: %.6fs for %d runs", n, total, repeat)
    return results


async def bench_callback(repeat: int, works: Optional[dict[str, Work]] = None) -> list[BenchResult]:
    """Generator-driven work versus the same work done through a callback."""
    if works is None:
        works = {"no work": no_work, "busy work": busy_work}

    results = []
    for label, work in works.items():

        async def via_generator(work: Work = work) -> None:
            gen = GeneratorEngine(Triple())
            while (value := await gen.next()) is not None:
                await work(value)
            if gen.return_value != 3:
                raise RuntimeError("Triple generator did not return 3")

        async def via_callback(work: Work = work) -> None:
            if await _callback_triple(work) != 3:
                raise RuntimeError("callback run did not return 3")

        for variant, once in (("generator", via_generator), ("callback", via_callback)):
            total = await _timed(repeat, once)
            results.append(
                BenchResult(
                    name=f"callback/{label}",
                    variant=variant,
                    runs=repeat,
                    total_seconds=total,
                    values_per_run=3,
                )
            )
    return results


async def bench_join(
    children: int,
    items: int,
    repeat: int,
    strategies: Optional[list[FrameStrategy]] = None,
) -> list[BenchResult]:
    """Throughput of joining ``children`` generators of ``items`` values each."""
    if strategies is None:
        strategies = list(FrameStrategy)

    results = []
    for strategy in strategies:

        async def once(strategy: FrameStrategy = strategy) -> None:
            merged = join(*(GeneratorEngine(Countdown(items)) for _ in range(children)), strategy=strategy)
            count = 0
            while await merged.next() is not None:
                count += 1
            if count != children * items:
                raise RuntimeError(f"join produced {count} values, expected {children * items}")

        total = await _timed(repeat, once)
        results.append(
            BenchResult(
                name=f"join/{children}x{items}",
                variant=strategy.value,
                runs=repeat,
                total_seconds=total,
                values_per_run=children * items,
            )
        )
    return results
