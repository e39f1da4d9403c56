"""Domain models for recurring donations."""

from recurring_donations.models.enums import (
    Currency,
    SubscriptionInterval,
    TransactionStatus,
    UrgencyLevel,
)
from recurring_donations.models.statistics import (
    DonorHistory,
    HealthSnapshot,
    PaymentStatistics,
    SubscriptionStatistics,
    SweepResult,
    TransactionStatistics,
)
from recurring_donations.models.subscription import (
    CampaignAnalysis,
    CreateSubscriptionRequest,
    Subscription,
)
from recurring_donations.models.transaction import Transaction

__all__ = [
    "CampaignAnalysis",
    "CreateSubscriptionRequest",
    "Currency",
    "DonorHistory",
    "HealthSnapshot",
    "PaymentStatistics",
    "Subscription",
    "SubscriptionInterval",
    "SubscriptionStatistics",
    "SweepResult",
    "Transaction",
    "TransactionStatistics",
    "TransactionStatus",
    "UrgencyLevel",
]
