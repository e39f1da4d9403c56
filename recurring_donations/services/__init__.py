"""Application services built on the store and the payment engine."""

from recurring_donations.services.analyzer import CampaignAnalyzer, fallback_analysis
from recurring_donations.services.health import HealthService
from recurring_donations.services.subscriptions import SubscriptionManager
from recurring_donations.services.transactions import TransactionService

__all__ = [
    "CampaignAnalyzer",
    "HealthService",
    "SubscriptionManager",
    "TransactionService",
    "fallback_analysis",
]
