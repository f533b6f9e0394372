"""
Async generators with pull-based consumption, cooperative cancellation and
fan-in.

Bodies are ordinary linear ``async`` code that hand values out through a
:class:`Handle`; consumers pull them one at a time with
``await engine.next()``.
"""

from pullgen.errors import (
    ConfigurationError,
    GeneratorCancelled,
    GeneratorError,
    GeneratorFinished,
)
from pullgen.generators.engine import GeneratorBody, GeneratorEngine, generator
from pullgen.generators.handle import Handle
from pullgen.generators.join import Join, join
from pullgen.generators.map import Map, map_generator
from pullgen.generators.state import GeneratorState, State
from pullgen.types import FrameStrategy

__all__ = [
    "ConfigurationError",
    "FrameStrategy",
    "GeneratorBody",
    "GeneratorCancelled",
    "GeneratorEngine",
    "GeneratorError",
    "GeneratorFinished",
    "GeneratorState",
    "Handle",
    "Join",
    "Map",
    "State",
    "generator",
    "join",
    "map_generator",
]
