"""
Error types raised by pullgen.

Body failures are never wrapped: whatever a generator body raises is stored and
re-raised verbatim to the consumer. The classes here cover the library's own
signals and misuse.
"""

from typing import Any

from pullgen.concurrency.cancellation import CancellationError


class GeneratorError(Exception):
    """Base class for pullgen errors that are not body failures."""


class ConfigurationError(GeneratorError, ValueError):
    """Raised when a configuration value cannot be interpreted."""


class GeneratorCancelled(CancellationError):
    """
    Raised inside a generator body at a checkpoint after ``cancel()``.

    Letting it escape the body ends the generator in the ``CANCELLED`` state.
    A body may catch it to clean up, but swallowing it and carrying on makes the
    body uncooperative: it then runs until it completes on its own.
    """

    def __init__(self, message: str = "Generator was cancelled"):
        super().__init__(message)


class GeneratorFinished(BaseException):
    """
    Control-flow signal raised by ``Handle.finish()``.

    Derives from ``BaseException`` like ``GeneratorExit`` so that ordinary
    ``except Exception`` handlers in a body do not intercept it. The engine
    consumes it; it never reaches the consumer.
    """

    def __init__(self, result: Any = None):
        self.result = result
        super().__init__(result)


__all__ = [
    "ConfigurationError",
    "GeneratorCancelled",
    "GeneratorError",
    "GeneratorFinished",
]
