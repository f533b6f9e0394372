from enum import Enum


class FrameStrategy(str, Enum):
    """How a join keeps the frames of its in-flight children.

    * ``EMBEDDED`` -- one slot per child is allocated when the join is built
      and kept for the join's lifetime.
    * ``DYNAMIC`` -- a child's slot is created on its first launch and released
      as soon as the child is done.
    """

    EMBEDDED = "embedded"
    DYNAMIC = "dynamic"

    @classmethod
    def list_values(cls) -> list[str]:
        return [strategy.value for strategy in cls]
