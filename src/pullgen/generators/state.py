from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class State(str, Enum):
    INITIALIZED = "initialized"
    STARTED = "started"
    ERROR = "error"
    RETURNED = "returned"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset({State.ERROR, State.RETURNED, State.CANCELLED})


@dataclass(frozen=True)
class GeneratorState:
    """
    A generator's state.

    * ``INITIALIZED`` -- it hasn't been started yet
    * ``STARTED`` -- it has been started and may have a value pending
    * ``RETURNED`` -- it has returned; ``result`` holds the return value
    * ``ERROR`` -- its body raised; ``error`` holds the exception
    * ``CANCELLED`` -- it honoured a cancellation request
    """

    kind: State
    result: Any = None
    error: Optional[BaseException] = None

    @classmethod
    def initialized(cls) -> "GeneratorState":
        return cls(State.INITIALIZED)

    @classmethod
    def started(cls) -> "GeneratorState":
        return cls(State.STARTED)

    @classmethod
    def returned(cls, result: Any) -> "GeneratorState":
        return cls(State.RETURNED, result=result)

    @classmethod
    def failed(cls, error: BaseException) -> "GeneratorState":
        return cls(State.ERROR, error=error)

    @classmethod
    def cancelled(cls) -> "GeneratorState":
        return cls(State.CANCELLED)

    @property
    def is_terminal(self) -> bool:
        return self.kind in TERMINAL_STATES

    def __eq__(self, other: object) -> bool:
        if isinstance(other, State):
            return self.kind is other
        if isinstance(other, GeneratorState):
            return (
                self.kind is other.kind
                and self.result == other.result
                and self.error is other.error
            )
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.kind)
