"""In-memory data store for subscriptions and transactions."""

from recurring_donations.store.memory import DonationStore

__all__ = ["DonationStore"]
