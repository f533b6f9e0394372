"""
Cooperative cancellation token.

A token is a flag set by one party and polled by another at points of its own
choosing. Setting it never interrupts anything; the polling side decides when
to honour it.
"""

from __future__ import annotations


class CancellationError(Exception):
    """Raised when an operation observes a cancelled CancellationToken."""

    def __init__(self, message: str = "Operation was cancelled"):
        self.message = message
        super().__init__(self.message)


class CancellationToken:
    """
    A one-way cancellation flag.

    Example:
        token = CancellationToken()

        async def worker():
            for item in items:
                token.raise_if_cancelled()
                await process(item)

        token.cancel()  # worker stops at its next check
    """

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        """
        Request cancellation.

        Idempotent; calling it again has no further effect.
        """
        self._cancelled = True

    def is_cancelled(self) -> bool:
        """
        Check if cancellation has been requested.

        Returns:
            True if ``cancel()`` has been called, False otherwise.
        """
        return self._cancelled

    def raise_if_cancelled(self, error: type[CancellationError] = CancellationError) -> None:
        """
        Raise ``error`` if cancellation has been requested.

        Args:
            error: The CancellationError subclass to raise.

        Raises:
            CancellationError: If the token has been cancelled.
        """
        if self._cancelled:
            raise error()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._cancelled})"


__all__ = [
    "CancellationError",
    "CancellationToken",
]
