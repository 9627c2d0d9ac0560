"""Verification Test: Chaos Monkey - Random process termination resilience.

Processes are spawned and killed at random while the monitor refreshes.
A process exiting between discovery and read must only drop that process
from the snapshot, never abort the refresh.
"""

import multiprocessing
import random
import threading
import time

import pytest

from proctop.config import DisplayState
from proctop.events import InputEvent, Intent
from proctop.monitor import Monitor
from proctop.scheduler import Scheduler


def dummy_worker(duration: float = 60.0) -> None:
    """A dummy worker process that sleeps for a given duration."""
    try:
        time.sleep(duration)
    except (KeyboardInterrupt, SystemExit):
        pass


class CountingRenderer:
    """Renderer that only counts frames."""

    def __init__(self) -> None:
        self.draws = 0

    def draw(self, snapshot, state) -> None:
        self.draws += 1

    def navigate(self, intent, snapshot) -> None:
        pass

    def resize(self, width, height) -> None:
        pass

    def suspended(self):
        raise AssertionError("not expected")


class TestChaosMonkey:
    """Chaos Monkey verification suite tests."""

    def test_refresh_survives_process_termination(self):
        """Test that refreshes keep committing while processes die mid-scan."""
        processes = []
        for _ in range(30):
            p = multiprocessing.Process(target=dummy_worker, args=(60.0,))
            p.start()
            processes.append(p)

        monitor = Monitor()
        state = DisplayState(sort_column="PID")

        try:
            snapshot = monitor.refresh(state)
            assert all(p.pid in snapshot.pids for p in processes)

            killed = random.sample(processes, 15)
            for p in killed:
                p.terminate()
                try:
                    snapshot = monitor.refresh(state)
                except Exception as e:
                    pytest.fail(f"Monitor crashed with exception: {e}")
                assert snapshot is monitor.current_snapshot()

            for p in killed:
                p.join(timeout=1.0)
            snapshot = monitor.refresh(state)

            # Reaped processes are gone, survivors are still listed
            assert not any(p.pid in snapshot.pids for p in killed)
            assert all(p.pid in snapshot.pids for p in processes if p not in killed)

        finally:
            for p in processes:
                if p.is_alive():
                    p.terminate()
            for p in processes:
                p.join(timeout=1.0)

    def test_zombie_process_handling(self):
        """Test that an unreaped child is skipped or classified, never fatal."""
        monitor = Monitor()
        p = multiprocessing.Process(target=dummy_worker, args=(0.1,))
        p.start()

        try:
            # Let it exit without joining it
            time.sleep(0.5)
            snapshot = monitor.refresh(DisplayState(sort_column="PID", show_kernel=True))
            position = snapshot.position_of(p.pid)
            if position is not None:
                assert snapshot.entries[position].record.is_kernel
            hidden = monitor.refresh(DisplayState(sort_column="PID"))
            assert p.pid not in hidden.pids
        finally:
            p.join(timeout=1.0)

    def test_scheduler_keeps_running_during_churn(self):
        """Test the loop keeps refreshing and rendering during rapid churn."""
        renderer = CountingRenderer()
        scheduler = Scheduler(Monitor(), renderer, DisplayState(tree=True), delay=0.1)
        thread = threading.Thread(target=scheduler.run, daemon=True)
        processes = []

        thread.start()
        try:
            start_time = time.time()
            while time.time() - start_time < 3.0:
                for _ in range(3):
                    p = multiprocessing.Process(target=dummy_worker, args=(10.0,))
                    p.start()
                    processes.append(p)
                alive = [p for p in processes if p.is_alive()]
                for p in random.sample(alive, min(2, len(alive))):
                    p.terminate()
                time.sleep(0.1)

            assert thread.is_alive(), "Scheduler died during churn"
            assert renderer.draws >= 10

        finally:
            scheduler.post(InputEvent(Intent.QUIT))
            thread.join(timeout=5.0)
            for p in processes:
                if p.is_alive():
                    p.terminate()
            for p in processes:
                p.join(timeout=0.5)

        assert not thread.is_alive()
