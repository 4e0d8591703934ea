"""
Observer Bridge: host change notifications -> coordinator cycles.

Host notifications arrive synchronously, often several per user edit, and
while the host is still inside its own mutation. The bridge never mutates
anything in that callback. It only enqueues one deferred cycle; further
notifications are dropped until that cycle has run. Notifications caused by
the cycle's own writes are dropped as well.
"""

from collections import deque
from typing import Callable, Deque

from ...utils.errors import TerrainSyncError
from ...utils.logging_system import log_debug, log_error


class TaskQueue:
    """FIFO of callbacks, drained outside the notification context."""

    def __init__(self):
        self._tasks: Deque[Callable[[], None]] = deque()

    def __len__(self):
        return len(self._tasks)

    def enqueue(self, task: Callable[[], None]):
        self._tasks.append(task)

    def drain(self) -> int:
        """Run queued tasks, including ones enqueued while draining. Returns the count run."""
        count = 0
        while self._tasks:
            task = self._tasks.popleft()
            task()
            count += 1
        return count

    def clear(self):
        self._tasks.clear()


class ObserverBridge:
    """Debounce + re-entrancy guard in front of a ChangeCoordinator.

    Guard state is per instance, so independent bridges never interfere.
    """

    def __init__(self, coordinator, scheduler):
        self.coordinator = coordinator
        self.scheduler = scheduler
        self.inhibit = False
        self.pending = False
        self.ignored = 0

    def on_change_entity(self, *_args):
        """Notification callback. Schedules at most one cycle per guard window."""
        if self.inhibit or self.pending:
            self.ignored += 1
            log_debug("[Observer] notification coalesced")
            return
        self.pending = True
        self.scheduler.defer(self._run_deferred)

    def _run_deferred(self):
        self.pending = False
        self.run_now()

    def run_now(self):
        """Run one coordinator cycle under the guard.

        Sync failures are logged and swallowed here, at the scheduler
        boundary, so the next notification still gets through.
        """
        if self.inhibit:
            self.ignored += 1
            return None
        self.inhibit = True
        try:
            return self.coordinator.on_change()
        except TerrainSyncError as ex:
            log_error(f"[Observer] sync failed: {ex}")
            return None
        finally:
            self.inhibit = False
