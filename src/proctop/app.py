"""proctop - Main Textual application."""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult, SuspendNotSupported
from textual.binding import Binding
from textual.widgets import Footer, Static

from proctop.config import Config, DisplayState
from proctop.errors import ProctopError, SuspendFailed
from proctop.events import InputEvent, Intent, Resize
from proctop.models import Snapshot
from proctop.monitor import Monitor
from proctop.scheduler import Scheduler
from proctop.view import format_header, format_summary, render_rows, scroll
from proctop.viewport import Viewport

logger = logging.getLogger(__name__)

# Summary line, column header and footer
CHROME_LINES = 3


class ProcessList(Static):
    """The visible slice of the process list."""

    DEFAULT_CSS = """
    ProcessList {
        height: 1fr;
    }
    """

    def show_rows(self, rows: list[tuple[str, bool]]) -> None:
        text = Text(no_wrap=True, overflow="crop")
        for index, (line, selected) in enumerate(rows):
            if index:
                text.append("\n")
            text.append(line, style="reverse" if selected else "")
        self.update(text)


class TerminalRenderer:
    """
    Paints snapshots into a ProctopApp on behalf of the scheduler thread.

    The viewport is only touched from the scheduler thread; widget updates
    are marshalled onto Textual's thread with call_from_thread.
    """

    def __init__(self, app: "ProctopApp") -> None:
        self._app = app
        self.viewport = Viewport()

    def draw(self, snapshot: Snapshot, state: DisplayState) -> None:
        self.viewport.sync(snapshot)
        self._call(
            self._app.show,
            format_summary(snapshot, state),
            scroll(format_header(state), self.viewport),
            render_rows(snapshot, self.viewport, state),
        )

    def navigate(self, intent: Intent, snapshot: Snapshot) -> None:
        self.viewport.handle(intent, snapshot)

    def resize(self, width: int, height: int) -> None:
        self.viewport.resize(width, height - CHROME_LINES)

    @contextmanager
    def suspended(self) -> Iterator[None]:
        """Hand the terminal back to the shell, and take it again on exit."""
        suspension = self._app.suspend()
        try:
            self._call(suspension.__enter__)
        except SuspendNotSupported as exc:
            raise SuspendFailed(f"terminal driver cannot suspend: {exc}") from exc
        try:
            yield
        finally:
            self._call(suspension.__exit__, None, None, None)

    def _call(self, callback, *args) -> None:
        if self._app.is_running:
            self._app.call_from_thread(callback, *args)


class ProctopApp(App):
    """Main proctop application."""

    TITLE = "proctop"
    SUB_TITLE = "Process Monitor"

    CSS = """
    Screen {
        layout: vertical;
    }

    #summary {
        height: 1;
        background: $surface;
    }

    #header {
        height: 1;
        background: $primary;
        text-style: bold;
    }
    """

    BINDINGS = [
        Binding("q,ctrl+c", "intent('quit')", "Quit", priority=True),
        Binding("s,f6", "intent('cycle_sort')", "Sort"),
        Binding("t", "intent('toggle_tree')", "Tree"),
        Binding("K,shift+k", "intent('toggle_kernel')", "Kernel"),
        Binding("v", "intent('toggle_verbose')", "Verbose"),
        Binding("ctrl+z", "intent('suspend')", "Suspend", show=False, priority=True),
        Binding("h,left", "intent('left')", show=False),
        Binding("l,right", "intent('right')", show=False),
        Binding("k,up", "intent('up')", show=False),
        Binding("j,down", "intent('down')", show=False),
        Binding("g,home", "intent('first')", show=False),
        Binding("G,shift+g,end", "intent('last')", show=False),
        Binding("0,circumflex_accent", "intent('reset_offset')", show=False),
        Binding("ctrl+u,pageup", "intent('page_up')", show=False),
        Binding("ctrl+d,pagedown", "intent('page_down')", show=False),
    ]

    def __init__(self, config: Config, monitor: Monitor | None = None) -> None:
        """Initialize the ProctopApp."""
        super().__init__()
        self._config = config
        self._renderer = TerminalRenderer(self)
        self._scheduler = Scheduler(
            monitor or Monitor(config.whitelist),
            self._renderer,
            DisplayState.from_config(config),
            delay=config.delay,
        )
        self._scheduler_thread: threading.Thread | None = None
        self.fatal_error: ProctopError | None = None

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield Static(id="summary")
        yield Static(id="header")
        yield ProcessList(id="process-list")
        yield Footer()

    def on_mount(self) -> None:
        """Start the scheduler once the terminal is ours."""
        self._scheduler.post(Resize(self.size.width, self.size.height))
        self._scheduler_thread = threading.Thread(
            target=self._run_scheduler,
            daemon=True,
            name="Scheduler",
        )
        self._scheduler_thread.start()

    def on_resize(self, event: events.Resize) -> None:
        self._scheduler.post(Resize(event.size.width, event.size.height))

    def on_unmount(self) -> None:
        # Lets the scheduler thread finish if we exit by other means
        self._scheduler.post(InputEvent(Intent.QUIT))

    def action_intent(self, name: str) -> None:
        """Hand a decoded key press to the scheduler."""
        self._scheduler.post(InputEvent(Intent(name)))

    def show(self, summary: str, header: str, rows: list[tuple[str, bool]]) -> None:
        """Paint one frame. Runs on Textual's thread."""
        self.query_one("#summary", Static).update(Text(summary, no_wrap=True, overflow="crop"))
        self.query_one("#header", Static).update(Text(header, no_wrap=True, overflow="crop"))
        self.query_one(ProcessList).show_rows(rows)

    def _run_scheduler(self) -> None:
        try:
            self._scheduler.run()
        except ProctopError as exc:
            logger.critical("Unrecoverable error: %s", exc)
            self.fatal_error = exc
            if self.is_running:
                self.call_from_thread(self.exit, return_code=exc.exit_status)
            return

        if self.is_running:
            self.call_from_thread(self.exit)
