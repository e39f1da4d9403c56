"""Aggregate result types for sweeps, payments, subscriptions and donors."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from recurring_donations.models.transaction import Transaction

CENT = Decimal("0.01")


def round_amount(value: Decimal) -> Decimal:
    """Round a display amount to 2 decimal places (half up)."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def mean_amount(total: Decimal, count: int) -> Decimal:
    """Rounded mean of ``count`` amounts summing to ``total``; 0 when empty."""
    if count == 0:
        return Decimal("0")
    return round_amount(total / count)


@dataclass
class SweepResult:
    """Outcome counters of one billing sweep.

    ``total_amount`` sums successful charges only, across currencies.
    """

    processed: int = 0
    successful: int = 0
    failed: int = 0
    total_amount: Decimal = Decimal("0")


@dataclass
class PaymentStatistics:
    """Read-only view over all stored transactions."""

    total_transactions: int
    successful_transactions: int
    failed_transactions: int
    total_amount_processed: Decimal
    average_transaction_amount: Decimal


@dataclass
class TransactionStatistics(PaymentStatistics):
    """Payment statistics plus per-status and per-currency counts."""

    transactions_by_status: dict[str, int] = field(default_factory=dict)
    transactions_by_currency: dict[str, int] = field(default_factory=dict)


@dataclass
class SubscriptionStatistics:
    """Counts plus the normalized monthly value of active subscriptions."""

    total_subscriptions: int
    active_subscriptions: int
    inactive_subscriptions: int
    total_monthly_value: Decimal
    subscriptions_by_interval: dict[str, int] = field(default_factory=dict)


@dataclass
class DonorHistory:
    """Donation history of a single donor.

    Totals cover completed transactions only; ``first_donation`` and
    ``last_donation`` span every attempt, failed ones included.
    """

    donor_id: str
    total_donations: int
    total_amount: Decimal
    average_donation: Decimal
    first_donation: datetime | None
    last_donation: datetime | None
    transactions: list[Transaction] = field(default_factory=list)


@dataclass
class HealthSnapshot:
    """Point-in-time health and volume snapshot."""

    status: str
    timestamp: datetime
    uptime_seconds: float
    subscriptions: int
    transactions: int
    payment_stats: PaymentStatistics
    details: dict[str, Any] = field(default_factory=dict)
