"""Read-side queries over stored transactions."""

from decimal import Decimal

from recurring_donations.models import (
    DonorHistory,
    Transaction,
    TransactionStatistics,
    TransactionStatus,
)
from recurring_donations.models.statistics import mean_amount
from recurring_donations.store import DonationStore


class TransactionService:
    """Transaction lookups, donor history and transaction statistics."""

    def __init__(self, store: DonationStore) -> None:
        self.store = store

    def list_all(self) -> list[Transaction]:
        return self.store.list_transactions()

    def get(self, transaction_id: str) -> Transaction | None:
        return self.store.get_transaction(transaction_id)

    def by_subscription(self, subscription_id: str) -> list[Transaction]:
        return self.store.list_transactions_by_subscription(subscription_id)

    def by_donor(self, donor_id: str) -> list[Transaction]:
        return self.store.list_transactions_by_donor(donor_id)

    def donor_history(self, donor_id: str) -> DonorHistory:
        """Summarize one donor's giving.

        Amounts count completed transactions only, while the first and last
        donation timestamps cover every attempt, failed ones included.
        """
        transactions = sorted(self.by_donor(donor_id), key=lambda txn: txn.processed_at)
        completed = [txn for txn in transactions if txn.status == TransactionStatus.COMPLETED]
        total = sum((txn.amount for txn in completed), Decimal("0"))

        return DonorHistory(
            donor_id=donor_id,
            total_donations=len(completed),
            total_amount=total,
            average_donation=mean_amount(total, len(completed)),
            first_donation=transactions[0].processed_at if transactions else None,
            last_donation=transactions[-1].processed_at if transactions else None,
            transactions=transactions,
        )

    def statistics(self) -> TransactionStatistics:
        transactions = self.store.list_transactions()
        completed = [txn for txn in transactions if txn.status == TransactionStatus.COMPLETED]
        failed = [txn for txn in transactions if txn.status == TransactionStatus.FAILED]
        total = sum((txn.amount for txn in completed), Decimal("0"))

        by_status: dict[str, int] = {}
        by_currency: dict[str, int] = {}
        for txn in transactions:
            by_status[txn.status.value] = by_status.get(txn.status.value, 0) + 1
            by_currency[txn.currency.value] = by_currency.get(txn.currency.value, 0) + 1

        return TransactionStatistics(
            total_transactions=len(transactions),
            successful_transactions=len(completed),
            failed_transactions=len(failed),
            total_amount_processed=total,
            average_transaction_amount=mean_amount(total, len(completed)),
            transactions_by_status=by_status,
            transactions_by_currency=by_currency,
        )
