"""Events consumed by the scheduler loop."""

from dataclasses import dataclass
from enum import Enum


class Intent(Enum):
    """User intents decoded from key presses."""

    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    FIRST = "first"
    LAST = "last"
    RESET_OFFSET = "reset_offset"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    CYCLE_SORT = "cycle_sort"
    TOGGLE_TREE = "toggle_tree"
    TOGGLE_KERNEL = "toggle_kernel"
    TOGGLE_VERBOSE = "toggle_verbose"
    QUIT = "quit"
    SUSPEND = "suspend"


NAVIGATION_INTENTS = frozenset(
    {
        Intent.LEFT,
        Intent.RIGHT,
        Intent.UP,
        Intent.DOWN,
        Intent.FIRST,
        Intent.LAST,
        Intent.RESET_OFFSET,
        Intent.PAGE_UP,
        Intent.PAGE_DOWN,
    }
)


@dataclass(slots=True, frozen=True)
class TimerTick:
    """The refresh delay elapsed."""

    at: float = 0.0


@dataclass(slots=True, frozen=True)
class InputEvent:
    """A decoded key press."""

    intent: Intent


@dataclass(slots=True, frozen=True)
class Resize:
    """The terminal changed size."""

    width: int
    height: int


Event = TimerTick | InputEvent | Resize
