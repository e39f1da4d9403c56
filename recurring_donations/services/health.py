"""Health and system statistics snapshots."""

import platform
import time
from typing import Any

from recurring_donations.billing.engine import PaymentEngine
from recurring_donations.clock import Clock, system_clock
from recurring_donations.models import HealthSnapshot
from recurring_donations.sinks.serialization import to_dict
from recurring_donations.store import DonationStore


class HealthService:
    """Report volumes, payment statistics and uptime.

    Uptime is measured from construction with a monotonic timer.
    """

    def __init__(
        self,
        store: DonationStore,
        engine: PaymentEngine,
        clock: Clock | None = None,
    ) -> None:
        self.store = store
        self.engine = engine
        self._clock = clock or system_clock
        self._started = time.monotonic()

    @property
    def uptime_seconds(self) -> float:
        return time.monotonic() - self._started

    def snapshot(self, **details: Any) -> HealthSnapshot:
        return HealthSnapshot(
            status="healthy",
            timestamp=self._clock(),
            uptime_seconds=self.uptime_seconds,
            subscriptions=self.store.count_subscriptions(),
            transactions=self.store.count_transactions(),
            payment_stats=self.engine.statistics(),
            details=details,
        )

    def system_stats(self) -> dict[str, Any]:
        """Store totals merged with payment statistics and process info."""
        return {
            "subscriptions": {"total": self.store.count_subscriptions()},
            "transactions": {
                "total": self.store.count_transactions(),
                **to_dict(self.engine.statistics()),
            },
            "system": {
                "uptime_seconds": self.uptime_seconds,
                "python_version": platform.python_version(),
            },
        }
