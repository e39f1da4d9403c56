"""Pytest configuration and fixtures."""

from datetime import datetime
from decimal import Decimal
from typing import Iterable

import pytest

from recurring_donations.app import DonationsApp, build_app
from recurring_donations.clock import SimulatedClock
from recurring_donations.config import DonationsConfig
from recurring_donations.models import (
    CampaignAnalysis,
    CreateSubscriptionRequest,
    Currency,
    Subscription,
    SubscriptionInterval,
    Transaction,
    TransactionStatus,
    UrgencyLevel,
)
from recurring_donations.store import DonationStore

T0 = datetime(2024, 1, 1, 12, 0, 0)


class SequenceRandom:
    """Random source returning fixed values in order, cycling at the end."""

    def __init__(self, values: Iterable[float]) -> None:
        self.values = list(values)
        self.calls = 0

    def random(self) -> float:
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def t0() -> datetime:
    """Fixed simulated start time."""
    return T0


@pytest.fixture
def clock() -> SimulatedClock:
    """Simulated clock starting at T0."""
    return SimulatedClock(T0)


@pytest.fixture
def store() -> DonationStore:
    """Empty in-memory store."""
    return DonationStore()


@pytest.fixture
def app(clock: SimulatedClock) -> DonationsApp:
    """App on a simulated clock whose charges always succeed."""
    return build_app(DonationsConfig(seed=42), clock=clock, rng=SequenceRandom([0.0]))


@pytest.fixture
def sample_request() -> CreateSubscriptionRequest:
    """Valid daily USD request."""
    return CreateSubscriptionRequest(
        donor_id="donor-001",
        amount=Decimal("10.00"),
        currency=Currency.USD,
        interval=SubscriptionInterval.DAILY,
        campaign_description="Emergency food for children",
    )


def make_subscription(
    subscription_id: str = "sub_001",
    donor_id: str = "donor-001",
    amount: str = "10.00",
    currency: Currency = Currency.USD,
    interval: SubscriptionInterval = SubscriptionInterval.DAILY,
    next_billing_date: datetime = T0,
    is_active: bool = True,
) -> Subscription:
    """Build a subscription without going through the manager."""
    return Subscription(
        subscription_id=subscription_id,
        donor_id=donor_id,
        amount=Decimal(amount),
        currency=currency,
        interval=interval,
        campaign_description="Clean water for villages",
        campaign_analysis=CampaignAnalysis(
            tags=("water", "sanitation"),
            summary="Campaign focused on water sanitation.",
            category="water-sanitation",
            urgency=UrgencyLevel.MEDIUM,
        ),
        created_at=T0,
        next_billing_date=next_billing_date,
        is_active=is_active,
    )


def make_transaction(
    transaction_id: str = "txn_001",
    subscription_id: str = "sub_001",
    donor_id: str = "donor-001",
    amount: str = "10.00",
    currency: Currency = Currency.USD,
    status: TransactionStatus = TransactionStatus.COMPLETED,
    processed_at: datetime = T0,
) -> Transaction:
    """Build a transaction without going through the engine."""
    return Transaction(
        transaction_id=transaction_id,
        subscription_id=subscription_id,
        donor_id=donor_id,
        amount=Decimal(amount),
        currency=currency,
        status=status,
        processed_at=processed_at,
        campaign_description="Clean water for villages",
    )


@pytest.fixture
def subscription_factory():
    """Factory for subscriptions with overridable fields."""
    return make_subscription


@pytest.fixture
def transaction_factory():
    """Factory for transactions with overridable fields."""
    return make_transaction


@pytest.fixture
def sequence_random():
    """Factory for fixed-sequence random sources."""
    return SequenceRandom
