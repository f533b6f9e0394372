from .atomic_counter import AtomicCounter
from .cancellation import CancellationError, CancellationToken

__all__ = [
    "AtomicCounter",
    "CancellationError",
    "CancellationToken",
]
