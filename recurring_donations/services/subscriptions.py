"""Subscription lifecycle and statistics."""

from __future__ import annotations

import logging
from decimal import Decimal

from recurring_donations.billing.dates import next_billing_date
from recurring_donations.clock import Clock, system_clock
from recurring_donations.exceptions import SubscriptionNotFoundError
from recurring_donations.generators.pool import IdGenerator
from recurring_donations.models import (
    CreateSubscriptionRequest,
    Subscription,
    SubscriptionInterval,
    SubscriptionStatistics,
)
from recurring_donations.models.statistics import round_amount
from recurring_donations.services.analyzer import CampaignAnalyzer
from recurring_donations.store import DonationStore

logger = logging.getLogger(__name__)

# Multipliers normalizing one charge to a monthly value.
MONTHLY_FACTORS: dict[SubscriptionInterval, Decimal] = {
    SubscriptionInterval.DAILY: Decimal("30"),
    SubscriptionInterval.WEEKLY: Decimal("4.33"),
    SubscriptionInterval.MONTHLY: Decimal("1"),
    SubscriptionInterval.YEARLY: Decimal("1") / Decimal("12"),
}


class SubscriptionManager:
    """Create, look up, deactivate and summarize subscriptions."""

    def __init__(
        self,
        store: DonationStore,
        analyzer: CampaignAnalyzer | None = None,
        clock: Clock | None = None,
        id_generator: IdGenerator | None = None,
    ) -> None:
        self.store = store
        self.analyzer = analyzer or CampaignAnalyzer()
        self._clock = clock or system_clock
        self._ids = id_generator or IdGenerator()

    def create(self, request: CreateSubscriptionRequest) -> Subscription:
        """Analyze the campaign, then store a new active subscription.

        The first billing date is one interval after creation.
        """
        logger.info("Creating subscription for donor %s", request.donor_id)

        analysis = self.analyzer.analyze(request.campaign_description)
        created_at = self._clock()

        subscription = Subscription(
            subscription_id=self._ids.subscription_id(),
            donor_id=request.donor_id,
            amount=request.amount,
            currency=request.currency,
            interval=request.interval,
            campaign_description=request.campaign_description,
            campaign_analysis=analysis,
            created_at=created_at,
            next_billing_date=next_billing_date(request.interval, created_at),
            is_active=True,
        )
        self.store.put_subscription(subscription)

        logger.info("Subscription created successfully: %s", subscription.subscription_id)
        return subscription

    def get(self, subscription_id: str) -> Subscription | None:
        return self.store.get_subscription(subscription_id)

    def require(self, subscription_id: str) -> Subscription:
        """Like ``get`` but raises SubscriptionNotFoundError for unknown ids."""
        subscription = self.store.get_subscription(subscription_id)
        if subscription is None:
            raise SubscriptionNotFoundError(f"Subscription {subscription_id} not found")
        return subscription

    def list_all(self) -> list[Subscription]:
        return self.store.list_subscriptions()

    def list_active(self) -> list[Subscription]:
        return self.store.list_active_subscriptions()

    def deactivate(self, subscription_id: str) -> Subscription | None:
        """Flip ``is_active`` off; idempotent, None for unknown ids."""
        subscription = self.store.get_subscription(subscription_id)
        if subscription is None:
            return None

        subscription.is_active = False
        self.store.put_subscription(subscription)

        logger.info("Subscription %s deactivated", subscription_id)
        return subscription

    def statistics(self) -> SubscriptionStatistics:
        subscriptions = self.store.list_subscriptions()
        active = [sub for sub in subscriptions if sub.is_active]

        total_monthly_value = Decimal("0")
        by_interval: dict[str, int] = {}
        for sub in active:
            by_interval[sub.interval.value] = by_interval.get(sub.interval.value, 0) + 1
            total_monthly_value += sub.amount * MONTHLY_FACTORS[sub.interval]

        return SubscriptionStatistics(
            total_subscriptions=len(subscriptions),
            active_subscriptions=len(active),
            inactive_subscriptions=len(subscriptions) - len(active),
            total_monthly_value=round_amount(total_monthly_value),
            subscriptions_by_interval=by_interval,
        )
