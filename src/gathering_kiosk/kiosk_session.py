"""Kiosk session - runs the check-in/check-out mode machine on a timer."""

import logging
import threading
from typing import Callable

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .adapters.system_clock import SystemClock
from .core.kiosk import KioskMode, KioskModeMachine
from .ports.clock import Clock

logger = logging.getLogger(__name__)

MODE_JOB_ID = "kiosk_mode"
DEFAULT_INTERVAL_MINUTES = 15


class KioskSession:
    """
    One active kiosk screen.

    start() evaluates the mode immediately and registers a single interval
    job that re-evaluates it; stop() removes the job. Manual overrides last
    until the next evaluation.

    Scheduled evaluations run on the scheduler's worker thread. Mode changes
    and their on_mode notifications are serialized by a reentrant lock, so
    on_mode may itself call toggle() or override().
    """

    def __init__(
        self,
        machine: KioskModeMachine,
        scheduler: BaseScheduler | None = None,
        clock: Clock | None = None,
        interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
        on_mode: Callable[[KioskMode], None] | None = None,
    ):
        self.machine = machine
        self._owns_scheduler = scheduler is None
        self.scheduler = scheduler if scheduler is not None else BackgroundScheduler()
        self.clock = clock or SystemClock()
        self.interval_minutes = interval_minutes
        self.on_mode = on_mode
        self.active = False
        self._lock = threading.RLock()

    @property
    def mode(self) -> KioskMode:
        return self.machine.mode

    def evaluate(self) -> KioskMode:
        """Re-apply the time-based mode, discarding any manual override."""
        with self._lock:
            previous = self.machine.mode
            mode = self.machine.evaluate(self.clock.now())
            if mode is not previous:
                logger.info(f"Kiosk mode switched to {mode.value}")
            self._notify(mode)
        return mode

    def toggle(self) -> KioskMode:
        with self._lock:
            mode = self.machine.toggle()
            logger.info(f"Kiosk mode manually set to {mode.value}")
            self._notify(mode)
        return mode

    def override(self, mode: KioskMode) -> KioskMode:
        with self._lock:
            self.machine.override(mode)
            logger.info(f"Kiosk mode manually set to {mode.value}")
            self._notify(mode)
        return mode

    def start(self) -> None:
        self.evaluate()
        self.scheduler.add_job(
            self.evaluate,
            IntervalTrigger(minutes=self.interval_minutes),
            id=MODE_JOB_ID,
            replace_existing=True,
        )
        logger.info(f"Kiosk mode re-evaluated every {self.interval_minutes} minutes")
        if self._owns_scheduler and not self.scheduler.running:
            self.scheduler.start()
        self.active = True

    def stop(self) -> None:
        if not self.active:
            return
        try:
            self.scheduler.remove_job(MODE_JOB_ID)
        except JobLookupError:
            logger.debug("Kiosk mode job already removed")
        if self._owns_scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        self.active = False
        logger.info("Kiosk session stopped")

    def __enter__(self) -> "KioskSession":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()

    def _notify(self, mode: KioskMode) -> None:
        if self.on_mode:
            self.on_mode(mode)
