"""Scenarios for simulating recurring billing."""

from recurring_donations.scenarios.billing_simulation import BillingSimulationScenario

__all__ = ["BillingSimulationScenario"]
