import inspect
from typing import Any, Awaitable, Callable, Generic, TypeVar, Union

from pullgen.generators.engine import GeneratorEngine
from pullgen.generators.handle import Handle

In = TypeVar("In")
Out = TypeVar("Out")

Mapper = Callable[[In], Union[Out, Awaitable[Out]]]


class Map(Generic[In, Out]):
    """
    Generator body that yields ``mapper(value)`` for every value of ``inner``.

    The mapper may be a plain function, an async function, or any callable
    object; a stateful mapper simply keeps its state on the object:

        class RunningTotal:
            def __init__(self):
                self.total = 0

            def __call__(self, value: int) -> int:
                self.total += value
                return self.total

        totals = map_generator(numbers, RunningTotal())
    """

    def __init__(self, inner: GeneratorEngine[In, Any], mapper: Mapper):
        if not callable(mapper):
            raise TypeError(f"mapper must be callable, got {mapper!r}")
        self.inner = inner
        self.mapper = mapper

    def __repr__(self) -> str:
        return f"Map({self.inner!r}, {getattr(self.mapper, '__name__', self.mapper)!r})"

    async def generate(self, handle: Handle[Out]) -> None:
        while (value := await self.inner.next()) is not None:
            mapped = self.mapper(value)
            if inspect.isawaitable(mapped):
                mapped = await mapped
            await handle.yield_(mapped)


def map_generator(inner: GeneratorEngine[In, Any], mapper: Mapper) -> GeneratorEngine[Out, None]:
    """Creates a generator that maps values yielded by ``inner`` through ``mapper``."""
    return GeneratorEngine(Map(inner, mapper))
