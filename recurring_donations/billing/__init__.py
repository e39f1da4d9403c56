"""Billing core: date arithmetic, payment engine and scheduler."""

from recurring_donations.billing.dates import next_billing_date
from recurring_donations.billing.engine import PaymentEngine
from recurring_donations.billing.scheduler import BillingScheduler, RecurringTask

__all__ = ["BillingScheduler", "PaymentEngine", "RecurringTask", "next_billing_date"]
