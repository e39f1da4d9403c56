"""Composition root wiring store, services, engine and scheduler.

Every component is constructed once here and receives its collaborators
explicitly; nothing is a module-level singleton.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from recurring_donations.billing.engine import PaymentEngine, RandomSource
from recurring_donations.billing.scheduler import BillingScheduler
from recurring_donations.clock import Clock, system_clock
from recurring_donations.config import DonationsConfig
from recurring_donations.generators.pool import IdGenerator
from recurring_donations.models import HealthSnapshot
from recurring_donations.services.analyzer import AnalyzerBackend, CampaignAnalyzer
from recurring_donations.services.health import HealthService
from recurring_donations.services.subscriptions import SubscriptionManager
from recurring_donations.services.transactions import TransactionService
from recurring_donations.store import DonationStore

logger = logging.getLogger(__name__)


@dataclass
class DonationsApp:
    """Fully wired set of components sharing one store."""

    config: DonationsConfig
    store: DonationStore
    analyzer: CampaignAnalyzer
    subscriptions: SubscriptionManager
    transactions: TransactionService
    engine: PaymentEngine
    scheduler: BillingScheduler
    health: HealthService

    def start(self) -> None:
        self.scheduler.start()

    def stop(self) -> None:
        self.scheduler.stop()

    def health_snapshot(self) -> HealthSnapshot:
        return self.health.snapshot(
            scheduler_running=self.scheduler.is_running,
            analyzer="backend" if self.analyzer.has_backend else "keyword-fallback",
        )


def build_app(
    config: DonationsConfig | None = None,
    analyzer_backend: AnalyzerBackend | None = None,
    clock: Clock | None = None,
    rng: RandomSource | None = None,
    sink: Any | None = None,
    stats_sink: Any | None = None,
) -> DonationsApp:
    """Build and wire all runtime components.

    Parameters
    ----------
    config : DonationsConfig | None
        Settings; defaults are used when omitted.
    analyzer_backend : AnalyzerBackend | None
        Campaign analysis backend; keyword fallback only when omitted.
    clock : Clock | None
        Shared wall-clock source.
    rng : RandomSource | None
        Outcome draw source; seeded from ``config.seed`` when omitted.
    sink : Any | None
        Receives every stored transaction.
    stats_sink : Any | None
        Receives the periodic payment statistics report.
    """
    config = config or DonationsConfig()
    config.validate()
    clock = clock or system_clock

    store = DonationStore()
    ids = IdGenerator()
    analyzer = CampaignAnalyzer(analyzer_backend)

    engine = PaymentEngine(
        store,
        success_rate=config.billing.success_rate,
        rng=rng,
        clock=clock,
        id_generator=ids,
        sink=sink,
        seed=config.seed,
    )
    scheduler = BillingScheduler(
        engine,
        sweep_interval_seconds=config.billing.sweep_interval_seconds,
        stats_interval_seconds=config.billing.stats_interval_seconds,
        stats_sink=stats_sink,
    )

    logger.debug("Donations app built (success_rate=%.2f)", config.billing.success_rate)

    return DonationsApp(
        config=config,
        store=store,
        analyzer=analyzer,
        subscriptions=SubscriptionManager(store, analyzer, clock=clock, id_generator=ids),
        transactions=TransactionService(store),
        engine=engine,
        scheduler=scheduler,
        health=HealthService(store, engine, clock=clock),
    )
