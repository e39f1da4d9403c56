"""In-memory donation store with per-collection locking."""

import threading
from dataclasses import dataclass, field

from recurring_donations.models import Subscription, Transaction


@dataclass
class DonationStore:
    """Process-lifetime store for subscriptions and transactions.

    ``put_*`` methods are upserts keyed by id. Each collection is guarded by
    its own lock; there is no cross-collection transaction. List methods
    return insertion-ordered snapshots.
    """

    # Primary entities
    subscriptions: dict[str, Subscription] = field(default_factory=dict)
    transactions: dict[str, Transaction] = field(default_factory=dict)

    # Relationship indexes (transaction ids, insertion ordered)
    _subscription_transactions: dict[str, list[str]] = field(default_factory=dict)
    _donor_transactions: dict[str, list[str]] = field(default_factory=dict)

    _subscriptions_lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _transactions_lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    # Subscriptions
    def put_subscription(self, subscription: Subscription) -> Subscription:
        """Insert or replace a subscription."""
        with self._subscriptions_lock:
            self.subscriptions[subscription.subscription_id] = subscription
        return subscription

    def get_subscription(self, subscription_id: str) -> Subscription | None:
        with self._subscriptions_lock:
            return self.subscriptions.get(subscription_id)

    def list_subscriptions(self) -> list[Subscription]:
        with self._subscriptions_lock:
            return list(self.subscriptions.values())

    def list_active_subscriptions(self) -> list[Subscription]:
        with self._subscriptions_lock:
            return [sub for sub in self.subscriptions.values() if sub.is_active]

    def count_subscriptions(self) -> int:
        with self._subscriptions_lock:
            return len(self.subscriptions)

    def delete_subscription(self, subscription_id: str) -> bool:
        """Remove a subscription; its transactions are kept."""
        with self._subscriptions_lock:
            return self.subscriptions.pop(subscription_id, None) is not None

    # Transactions
    def put_transaction(self, transaction: Transaction) -> Transaction:
        """Insert or replace a transaction, keeping the indexes in sync."""
        with self._transactions_lock:
            previous = self.transactions.get(transaction.transaction_id)
            if previous is not None:
                self._unindex(previous)
            self.transactions[transaction.transaction_id] = transaction
            self._subscription_transactions.setdefault(
                transaction.subscription_id, []
            ).append(transaction.transaction_id)
            self._donor_transactions.setdefault(transaction.donor_id, []).append(
                transaction.transaction_id
            )
        return transaction

    def _unindex(self, transaction: Transaction) -> None:
        for index, key in (
            (self._subscription_transactions, transaction.subscription_id),
            (self._donor_transactions, transaction.donor_id),
        ):
            ids = index.get(key, [])
            if transaction.transaction_id in ids:
                ids.remove(transaction.transaction_id)

    def get_transaction(self, transaction_id: str) -> Transaction | None:
        with self._transactions_lock:
            return self.transactions.get(transaction_id)

    def list_transactions(self) -> list[Transaction]:
        with self._transactions_lock:
            return list(self.transactions.values())

    def list_transactions_by_subscription(self, subscription_id: str) -> list[Transaction]:
        """Get all transactions for a subscription."""
        with self._transactions_lock:
            ids = self._subscription_transactions.get(subscription_id, [])
            return [self.transactions[tid] for tid in ids]

    def list_transactions_by_donor(self, donor_id: str) -> list[Transaction]:
        """Get all transactions for a donor."""
        with self._transactions_lock:
            ids = self._donor_transactions.get(donor_id, [])
            return [self.transactions[tid] for tid in ids]

    def count_transactions(self) -> int:
        with self._transactions_lock:
            return len(self.transactions)

    def clear(self) -> None:
        """Drop every record."""
        with self._subscriptions_lock:
            self.subscriptions.clear()
        with self._transactions_lock:
            self.transactions.clear()
            self._subscription_transactions.clear()
            self._donor_transactions.clear()

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "subscriptions": self.count_subscriptions(),
            "active_subscriptions": len(self.list_active_subscriptions()),
            "transactions": self.count_transactions(),
        }
