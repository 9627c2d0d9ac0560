"""Selection and scroll position over the process list."""

from proctop.events import Intent
from proctop.models import Snapshot

HORIZONTAL_STEP = 8


class Viewport:
    """
    Which row is selected and which part of the list is visible.

    Selection follows the selected process by PID across snapshots, so a
    refresh that reorders rows keeps the same process highlighted. If that
    process is gone, the selection stays at the same row index instead.
    """

    def __init__(self, width: int = 80, height: int = 24) -> None:
        self.width = width
        self.height = height  # Rows available for process lines
        self.selected = 0
        self.top = 0
        self.offset = 0  # Horizontal scroll of the command column
        self.selected_pid: int | None = None
        self._count = 0

    def resize(self, width: int, height: int) -> None:
        self.width = max(1, width)
        self.height = max(1, height)
        self._scroll_to_selection()

    def sync(self, snapshot: Snapshot) -> None:
        """Re-anchor the selection on a new snapshot."""
        self._count = len(snapshot)
        if self.selected_pid is not None:
            position = snapshot.position_of(self.selected_pid)
            if position is not None:
                self.selected = position
        self._clamp()
        self.selected_pid = snapshot.entries[self.selected].record.pid if self._count else None
        self._scroll_to_selection()

    def handle(self, intent: Intent, snapshot: Snapshot) -> None:
        """Apply a navigation intent."""
        self._count = len(snapshot)
        if intent is Intent.UP:
            self.selected -= 1
        elif intent is Intent.DOWN:
            self.selected += 1
        elif intent is Intent.FIRST:
            self.selected = 0
        elif intent is Intent.LAST:
            self.selected = self._count - 1
        elif intent is Intent.PAGE_UP:
            self.selected -= self.height
        elif intent is Intent.PAGE_DOWN:
            self.selected += self.height
        elif intent is Intent.LEFT:
            self.offset = max(0, self.offset - HORIZONTAL_STEP)
        elif intent is Intent.RIGHT:
            self.offset += HORIZONTAL_STEP
        elif intent is Intent.RESET_OFFSET:
            self.offset = 0

        self._clamp()
        self.selected_pid = snapshot.entries[self.selected].record.pid if self._count else None
        self._scroll_to_selection()

    def visible_range(self) -> range:
        """Indices of the snapshot entries currently on screen."""
        return range(self.top, min(self.top + self.height, self._count))

    def _clamp(self) -> None:
        self.selected = max(0, min(self.selected, self._count - 1))

    def _scroll_to_selection(self) -> None:
        if self.selected < self.top:
            self.top = self.selected
        elif self.selected >= self.top + self.height:
            self.top = self.selected - self.height + 1
        self.top = max(0, min(self.top, max(0, self._count - self.height)))
