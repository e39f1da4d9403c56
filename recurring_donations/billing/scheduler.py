"""Background scheduler driving billing sweeps and statistics reports."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable

from recurring_donations.billing.engine import PaymentEngine
from recurring_donations.models import PaymentStatistics, SweepResult
from recurring_donations.sinks.serialization import to_dict

logger = logging.getLogger(__name__)


class RecurringTask:
    """Run ``action`` every ``interval_seconds`` on a daemon thread.

    Ticks are non-reentrant: a tick that arrives while the previous run is
    still going is skipped and logged, never queued.

    Parameters
    ----------
    name : str
        Task name used for the thread and in log messages.
    interval_seconds : float
        Fixed cadence between scheduled fire times.
    action : Callable[[], Any]
        Work to run on each tick.
    """

    def __init__(self, name: str, interval_seconds: float, action: Callable[[], Any]) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.name = name
        self.interval_seconds = interval_seconds
        self._action = action
        self._running = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._counter_lock = threading.Lock()
        self.runs = 0
        self.skipped = 0

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_alive:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Stop scheduling; a run already in progress finishes first."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def fire(self) -> Any:
        """Run the action now unless a run is in progress.

        Returns the action's result, or None when the tick was skipped or
        the action raised.
        """
        if not self._running.acquire(blocking=False):
            self._count_skip()
            logger.warning("Skipping %s tick: previous run still in progress", self.name)
            return None
        try:
            with self._counter_lock:
                self.runs += 1
            return self._action()
        except Exception:
            logger.exception("Error in scheduled task %s", self.name)
            return None
        finally:
            self._running.release()

    def _count_skip(self) -> None:
        with self._counter_lock:
            self.skipped += 1

    def _loop(self) -> None:
        next_fire = time.monotonic() + self.interval_seconds
        while not self._stop.wait(max(0.0, next_fire - time.monotonic())):
            self.fire()
            next_fire += self.interval_seconds
            now = time.monotonic()
            while next_fire <= now:
                self._count_skip()
                logger.warning("Skipping %s tick: run overran its interval", self.name)
                next_fire += self.interval_seconds


class BillingScheduler:
    """Hourly billing sweeps plus a daily payment-statistics report.

    Parameters
    ----------
    engine : PaymentEngine
        Engine whose ``sweep()`` and ``statistics()`` are driven.
    sweep_interval_seconds : float
        Cadence of billing sweeps (default hourly).
    stats_interval_seconds : float
        Cadence of the statistics report (default daily).
    stats_sink : Any | None
        Optional sink receiving each report via
        ``write_batch("payment_statistics", [stats])``.
    """

    def __init__(
        self,
        engine: PaymentEngine,
        sweep_interval_seconds: float = 3600.0,
        stats_interval_seconds: float = 86400.0,
        stats_sink: Any | None = None,
    ) -> None:
        self.engine = engine
        self.stats_sink = stats_sink
        self.sweep_task = RecurringTask("billing-sweep", sweep_interval_seconds, self.run_sweep)
        self.stats_task = RecurringTask(
            "payment-statistics", stats_interval_seconds, self.report_statistics
        )

    @property
    def is_running(self) -> bool:
        return self.sweep_task.is_alive or self.stats_task.is_alive

    def start(self) -> None:
        self.sweep_task.start()
        self.stats_task.start()
        logger.info(
            "Background jobs initialized: sweep every %.0fs, statistics every %.0fs",
            self.sweep_task.interval_seconds,
            self.stats_task.interval_seconds,
        )

    def stop(self, timeout: float | None = 10.0) -> None:
        """Release both timers."""
        self.sweep_task.stop(timeout)
        self.stats_task.stop(timeout)
        logger.info("Background jobs stopped")

    def run_sweep(self) -> SweepResult:
        logger.info("Starting scheduled payment processing...")
        result = self.engine.sweep()
        if result.processed > 0:
            logger.info("Payment processing completed: %s", to_dict(result))
        return result

    def report_statistics(self) -> PaymentStatistics:
        logger.info("Generating daily payment summary...")
        stats = self.engine.statistics()
        logger.info("Daily Summary: %s", to_dict(stats))
        if self.stats_sink is not None:
            self.stats_sink.write_batch("payment_statistics", [stats])
        return stats

    def trigger_now(self) -> SweepResult:
        """Sweep immediately without moving the timer's next fire time."""
        logger.info("Manually triggering payment processing...")
        return self.engine.sweep()
