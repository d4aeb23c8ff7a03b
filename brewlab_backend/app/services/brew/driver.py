from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from threading import RLock
from typing import Callable, Optional

from brewlab_backend.app.schemas import BrewSessionState, SessionCommand
from .guide import BrewGuide
from .session import apply_command, tick

__all__ = ["SessionDriver"]

log = logging.getLogger("brewlab.driver")
if not log.handlers:
    handler = logging.StreamHandler()
    log.addHandler(handler)
    log.setLevel(logging.INFO)

NotifySink = Callable[[str], None]
SnapshotSink = Callable[[BrewSessionState], None]


def _log_failure(what: str) -> Callable[[Future], None]:
    def _done(future: Future) -> None:
        exc = future.exception()
        if exc is not None:
            log.warning(f"[driver] {what} failed: {exc}")
    return _done


class SessionDriver:
    """
    The one periodic driver for a brew session.

    - step() applies a single tick and swaps the state whole under a lock, so readers
      never see a half-applied transition.
    - The notification sink (called with the step id) fires when last_notified_step_id
      changes between the previous and the new state.
    - Notifications and snapshots run on a background executor, so a slow sink or a
      slow disk never delays ticking; their errors are logged and dropped.
    """

    def __init__(
        self,
        state: BrewSessionState,
        guide: BrewGuide,
        notify: Optional[NotifySink] = None,
        save_snapshot: Optional[SnapshotSink] = None,
        interval: float = 1.0,
        executor: Optional[Executor] = None,
    ) -> None:
        self._state = state
        self.guide = guide
        self._notify = notify
        self._save_snapshot = save_snapshot
        self.interval = interval
        self._lock = RLock()
        self._executor = executor or (
            ThreadPoolExecutor(max_workers=1) if (notify or save_snapshot) else None
        )
        self._stopped: Optional[asyncio.Event] = None  # created inside run()

    @property
    def state(self) -> BrewSessionState:
        return self._state

    # Purpose:
    # Swap in a new state and perform the side effects implied by the change.
    def _commit(self, new_state: BrewSessionState) -> BrewSessionState:
        with self._lock:
            prev = self._state
            self._state = new_state
        if new_state is prev:
            return new_state
        if new_state.last_notified_step_id != prev.last_notified_step_id and new_state.last_notified_step_id:
            self._fire_notification(new_state.last_notified_step_id)
        self._persist(new_state)
        return new_state

    def _fire_notification(self, step_id: str) -> None:
        if self._notify is None or self._executor is None:
            return
        future = self._executor.submit(self._notify, step_id)
        future.add_done_callback(_log_failure(f"notification sink for step {step_id}"))

    def _persist(self, state: BrewSessionState) -> None:
        if self._save_snapshot is None or self._executor is None:
            return
        future = self._executor.submit(self._save_snapshot, state)
        future.add_done_callback(_log_failure("snapshot save"))

    # ---------- public API ----------
    def step(self) -> BrewSessionState:
        with self._lock:
            new_state = tick(self._state, self.guide.plan)
            return self._commit(new_state)

    def apply(
        self,
        command: SessionCommand | str,
        *,
        item_index: Optional[int] = None,
        grams: Optional[float] = None,
    ) -> BrewSessionState:
        with self._lock:
            new_state = apply_command(
                self._state, command, self.guide.plan, self.guide.checklist_size,
                item_index=item_index, grams=grams,
            )
            return self._commit(new_state)

    async def run(self, max_ticks: Optional[int] = None) -> BrewSessionState:
        """Tick every `interval` seconds until stop() or the session completes."""
        self._stopped = asyncio.Event()
        ticks = 0
        while not self._stopped.is_set():
            await asyncio.sleep(self.interval)
            state = self.step()
            ticks += 1
            if state.is_complete or (max_ticks is not None and ticks >= max_ticks):
                break
        return self._state

    def stop(self) -> None:
        if self._stopped is not None:
            self._stopped.set()

    def close(self) -> None:
        self.stop()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
