"""Billing simulation over a simulated clock."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from recurring_donations.app import DonationsApp, build_app
from recurring_donations.clock import SimulatedClock
from recurring_donations.config import BillingConfig, DonationsConfig
from recurring_donations.generators.subscription import SubscriptionRequestGenerator
from recurring_donations.models import SweepResult

logger = logging.getLogger(__name__)


class BillingSimulationScenario:
    """Create synthetic subscriptions and bill them over simulated days.

    The scenario drives sweeps directly, one per step, instead of waiting
    for the real-time scheduler.
    """

    def __init__(
        self,
        num_subscriptions: int = 100,
        days: int = 30,
        step: timedelta = timedelta(hours=1),
        success_rate: float = 0.95,
        deactivation_rate: float = 0.0,
        start: datetime | None = None,
        seed: int | None = None,
        sink: Any | None = None,
    ) -> None:
        """Initialize billing simulation.

        Parameters
        ----------
        num_subscriptions : int
            Number of subscriptions to create at the start.
        days : int
            Simulated duration.
        step : timedelta
            Simulated time between sweeps (default one hour, like the scheduler).
        success_rate : float
            Probability that a simulated charge completes.
        deactivation_rate : float
            Share of subscriptions cancelled halfway through the run.
        start : datetime | None
            Simulated start time (default: now, truncated to the hour).
        seed : int | None
            Random seed for reproducibility.
        sink : Any | None
            Receives every transaction as it is stored.
        """
        self.num_subscriptions = num_subscriptions
        self.days = days
        self.step = step
        self.deactivation_rate = deactivation_rate
        self.seed = seed

        start = start or datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0)
        self.clock = SimulatedClock(start)
        config = DonationsConfig(billing=BillingConfig(success_rate=success_rate), seed=seed)
        self.app: DonationsApp = build_app(config, clock=self.clock, sink=sink)
        self._request_gen = SubscriptionRequestGenerator(seed=seed)
        self.results: list[SweepResult] = []

    def generate(self) -> DonationsApp:
        """Create the initial subscriptions.

        Returns
        -------
        DonationsApp
            App whose store holds the subscriptions.
        """
        for request in self._request_gen.generate_batch(self.num_subscriptions):
            self.app.subscriptions.create(request)

        logger.info("Created %d subscriptions", self.app.store.count_subscriptions())
        return self.app

    def run(self) -> list[SweepResult]:
        """Advance the clock step by step, sweeping after each step."""
        end = self.clock() + timedelta(days=self.days)
        halfway = self.clock() + timedelta(days=self.days) / 2
        cancelled = False

        while self.clock() + self.step <= end:
            self.clock.advance(self.step)
            if not cancelled and self.deactivation_rate > 0 and self.clock() >= halfway:
                self._cancel_some()
                cancelled = True
            self.results.append(self.app.engine.sweep())

        totals = self.totals()
        logger.info(
            "Simulation finished: %d sweeps, processed=%d successful=%d failed=%d total=%s",
            len(self.results),
            totals.processed,
            totals.successful,
            totals.failed,
            totals.total_amount,
        )
        return self.results

    def _cancel_some(self) -> None:
        active = self.app.subscriptions.list_active()
        count = int(len(active) * self.deactivation_rate)
        for subscription in active[:count]:
            self.app.subscriptions.deactivate(subscription.subscription_id)
        logger.info("Cancelled %d subscriptions", count)

    def totals(self) -> SweepResult:
        """Sum of all sweep results so far."""
        total = SweepResult()
        for result in self.results:
            total.processed += result.processed
            total.successful += result.successful
            total.failed += result.failed
            total.total_amount += result.total_amount
        return total

    def export(self, sinks: list[Any]) -> None:
        """Export subscriptions, transactions and statistics to sinks.

        Parameters
        ----------
        sinks : list[Any]
            List of sink instances (ConsoleSink, JsonFileSink, KafkaSink).
        """
        for sink in sinks:
            sink.write_batch("subscriptions", self.app.subscriptions.list_all())
            sink.write_batch("transactions", self.app.transactions.list_all())
            sink.write_batch("sweep_results", self.results)
            sink.write_batch("subscription_statistics", [self.app.subscriptions.statistics()])
            sink.write_batch("transaction_statistics", [self.app.transactions.statistics()])

        logger.info("Exported billing simulation data to %d sinks", len(sinks))
