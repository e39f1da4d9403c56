"""Enumeration types for donation entities."""

from enum import Enum


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    CAD = "CAD"
    AUD = "AUD"


class SubscriptionInterval(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class TransactionStatus(str, Enum):
    # PENDING is the transient state of a charge in flight; stored records
    # are always COMPLETED or FAILED.
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class UrgencyLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
