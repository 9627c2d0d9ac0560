"""The refresh/event loop driving the monitor and the renderer."""

import logging
import os
import signal
import threading
import time
from collections.abc import Callable
from contextlib import AbstractContextManager
from queue import Queue
from typing import Protocol

from proctop.config import DisplayState
from proctop.errors import SuspendFailed
from proctop.events import NAVIGATION_INTENTS, Event, InputEvent, Intent, Resize, TimerTick
from proctop.monitor import Monitor
from proctop.models import Snapshot

logger = logging.getLogger(__name__)


def signal_self(sig: signal.Signals) -> None:
    """Send ``sig`` to our own process. Failure leaves the terminal in an unknown state."""
    try:
        os.kill(os.getpid(), sig)
    except OSError as exc:
        raise SuspendFailed(f"cannot signal self with {sig.name}: {exc}") from exc


class Renderer(Protocol):
    """What the scheduler needs from the terminal side."""

    def draw(self, snapshot: Snapshot, state: DisplayState) -> None: ...

    def navigate(self, intent: Intent, snapshot: Snapshot) -> None: ...

    def resize(self, width: int, height: int) -> None: ...

    def suspended(self) -> AbstractContextManager[None]:
        """Release the terminal for the duration of the context."""
        ...


class Ticker:
    """
    Posts a TimerTick every ``delay`` seconds from a daemon thread.

    Waiting on an Event rather than sleeping lets stop() return promptly.
    """

    def __init__(self, post: Callable[[Event], None], delay: float) -> None:
        self._post = post
        self._delay = delay
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def is_running(self) -> bool:
        """Check if the ticker thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the ticker thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._tick_loop,
            daemon=True,
            name="Ticker",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the ticker thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _tick_loop(self) -> None:
        while not self._stop_event.wait(timeout=self._delay):
            self._post(TimerTick(at=time.monotonic()))


class Scheduler:
    """
    Single consumer of timer, input and resize events.

    Only the thread running :meth:`run` touches the monitor, the display
    state and the renderer's viewport. Producers hand events over through
    :meth:`post`, which never blocks.
    """

    def __init__(
        self,
        monitor: Monitor,
        renderer: Renderer,
        state: DisplayState,
        delay: float,
        events: "Queue[Event] | None" = None,
    ) -> None:
        self._monitor = monitor
        self._renderer = renderer
        self._state = state
        self._events: Queue[Event] = events if events is not None else Queue()
        self._tick_pending = threading.Event()
        self._ticker = Ticker(self._post_tick, delay)
        self.renders = 0

    @property
    def state(self) -> DisplayState:
        return self._state

    @property
    def monitor(self) -> Monitor:
        return self._monitor

    def post(self, event: Event) -> None:
        """Queue an event for the loop. Safe from any thread."""
        self._events.put_nowait(event)

    def _post_tick(self, event: TimerTick) -> None:
        # At most one tick waits in the queue; a slow refresh drops the rest
        if self._tick_pending.is_set():
            return
        self._tick_pending.set()
        self.post(event)

    def run(self, with_ticker: bool = True) -> None:
        """
        Refresh, draw, then handle events until a quit intent arrives.

        Errors from the monitor or the suspend transition are unrecoverable
        and propagate to the caller.
        """
        self._monitor.refresh(self._state)
        self._render()
        if with_ticker:
            self._ticker.start()
        try:
            while self.step(self._events.get()):
                pass
        finally:
            self._ticker.stop()
        logger.info("Scheduler stopped after %d renders", self.renders)

    def step(self, event: Event) -> bool:
        """Handle one event. Returns False once the loop should end."""
        if isinstance(event, TimerTick):
            self._tick_pending.clear()
            self._monitor.refresh(self._state)
        elif isinstance(event, Resize):
            self._renderer.resize(event.width, event.height)
        elif isinstance(event, InputEvent):
            intent = event.intent
            if intent is Intent.QUIT:
                return False
            if intent is Intent.SUSPEND:
                self._suspend()
                return True
            self._apply(intent)

        self._render()
        return True

    def _apply(self, intent: Intent) -> None:
        if intent in NAVIGATION_INTENTS:
            self._renderer.navigate(intent, self._monitor.current_snapshot())
            return

        if intent is Intent.CYCLE_SORT:
            self._state.cycle_sort()
        elif intent is Intent.TOGGLE_TREE:
            self._state.tree = not self._state.tree
        elif intent is Intent.TOGGLE_KERNEL:
            self._state.show_kernel = not self._state.show_kernel
        elif intent is Intent.TOGGLE_VERBOSE:
            self._state.verbose = not self._state.verbose
            return  # Rendering only

        logger.info("Display changed: %s", self._state)
        self._monitor.refresh(self._state)

    def _suspend(self) -> None:
        logger.info("Suspending")
        with self._renderer.suspended():
            signal_self(signal.SIGTSTP)
        logger.info("Resumed")

    def _render(self) -> None:
        self._renderer.draw(self._monitor.current_snapshot(), self._state)
        self.renders += 1
