"""Identifier and synthetic data generators."""

from recurring_donations.generators.pool import FakerPool, IdGenerator, UUIDPool
from recurring_donations.generators.subscription import SubscriptionRequestGenerator

__all__ = ["FakerPool", "IdGenerator", "SubscriptionRequestGenerator", "UUIDPool"]
