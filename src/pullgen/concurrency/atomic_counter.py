import threading


class AtomicCounter:
    """
    A thread-safe atomic counter with synchronous read-modify-write operations.

    Unlike an ``asyncio.Lock`` based counter, every operation here completes
    without yielding to the event loop. A caller can therefore check the counter
    and suspend on a future with no await in between, which is what lets a
    waiter avoid missing a wakeup.

    Example:
        counter = AtomicCounter()

        previous = counter.get_and_increment()  # 0
        counter.value  # 1

        reports = counter.get_and_set(0)  # 1
        counter.value  # 0
    """

    def __init__(self, initial_value: int = 0) -> None:
        self._value = initial_value
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        """Get the current counter value."""
        with self._lock:
            return self._value

    def get_and_increment(self, amount: int = 1) -> int:
        """
        Atomically get the current value and increment by the specified amount.

        Args:
            amount: The amount to increment by (default: 1).

        Returns:
            The value before incrementing.
        """
        with self._lock:
            current = self._value
            self._value += amount
            return current

    def get_and_set(self, value: int) -> int:
        """
        Atomically get the current value and set to a new value.

        Args:
            value: The new value to set.

        Returns:
            The value before setting.
        """
        with self._lock:
            current = self._value
            self._value = value
            return current

    def __repr__(self) -> str:
        return f"AtomicCounter(value={self._value})"
