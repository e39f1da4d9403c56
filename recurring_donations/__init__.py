"""Recurring donation billing core: subscriptions, simulated charges and scheduling."""

__version__ = "0.1.0"
