"""Billing-date arithmetic."""

from datetime import datetime

from dateutil.relativedelta import relativedelta

from recurring_donations.models.enums import SubscriptionInterval

# relativedelta clamps month/year steps to the last valid day (Jan 31 -> Feb 28).
INTERVAL_STEPS: dict[SubscriptionInterval, relativedelta] = {
    SubscriptionInterval.DAILY: relativedelta(days=1),
    SubscriptionInterval.WEEKLY: relativedelta(days=7),
    SubscriptionInterval.MONTHLY: relativedelta(months=1),
    SubscriptionInterval.YEARLY: relativedelta(years=1),
}


def next_billing_date(interval: SubscriptionInterval | str, now: datetime) -> datetime:
    """Return the billing date one interval after ``now``.

    Parameters
    ----------
    interval : SubscriptionInterval | str
        Billing cadence.
    now : datetime
        Creation time or the processing time of the last successful charge.

    Returns
    -------
    datetime
        ``now`` advanced by exactly one calendar interval.
    """
    return now + INTERVAL_STEPS[SubscriptionInterval(interval)]
