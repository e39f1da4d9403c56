"""Transaction model for billing attempts."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from recurring_donations.models.enums import Currency, TransactionStatus


@dataclass
class Transaction:
    """One billing attempt against a subscription.

    Amount, currency, donor and campaign description are copied from the
    subscription when the charge is processed and never re-derived.
    """

    transaction_id: str
    subscription_id: str
    donor_id: str
    amount: Decimal
    currency: Currency
    status: TransactionStatus
    processed_at: datetime
    campaign_description: str

    @property
    def is_completed(self) -> bool:
        return self.status == TransactionStatus.COMPLETED
