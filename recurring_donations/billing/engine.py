"""Payment engine: simulated charges and billing sweeps."""

from __future__ import annotations

import logging
import random
import threading
from datetime import datetime
from decimal import Decimal
from typing import Any, Protocol

from recurring_donations.billing.dates import next_billing_date
from recurring_donations.clock import Clock, system_clock
from recurring_donations.exceptions import SinkError, StoreWriteError
from recurring_donations.generators.pool import IdGenerator
from recurring_donations.models import (
    PaymentStatistics,
    Subscription,
    SweepResult,
    Transaction,
    TransactionStatus,
)
from recurring_donations.models.statistics import mean_amount
from recurring_donations.store import DonationStore

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """Anything with ``random() -> float`` in [0, 1), e.g. ``random.Random``."""

    def random(self) -> float: ...


class PaymentEngine:
    """Simulate charging subscriptions and run billing sweeps.

    Parameters
    ----------
    store : DonationStore
        Store holding subscriptions and receiving transactions.
    success_rate : float
        Probability that a simulated charge completes.
    rng : RandomSource | None
        Source of outcome draws; defaults to ``random.Random(seed)``.
    clock : Clock | None
        Wall-clock source for due checks and processing timestamps.
    id_generator : IdGenerator | None
        Transaction id source.
    sink : Any | None
        Optional sink receiving every stored transaction via
        ``send("transactions", transaction)``.
    seed : int | None
        Seed for the default random source.
    """

    SUCCESS_RATE = 0.95

    def __init__(
        self,
        store: DonationStore,
        success_rate: float = SUCCESS_RATE,
        rng: RandomSource | None = None,
        clock: Clock | None = None,
        id_generator: IdGenerator | None = None,
        sink: Any | None = None,
        seed: int | None = None,
    ) -> None:
        self.store = store
        self.success_rate = success_rate
        self._rng = rng or random.Random(seed)
        self._clock = clock or system_clock
        self._ids = id_generator or IdGenerator()
        self._sink = sink

        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._rng_lock = threading.Lock()

    def _lock_for(self, subscription_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(subscription_id, threading.Lock())

    def _draw(self) -> float:
        with self._rng_lock:
            return self._rng.random()

    @staticmethod
    def is_due(subscription: Subscription, now: datetime) -> bool:
        """Active and billing date reached."""
        return subscription.is_active and subscription.next_billing_date <= now

    def charge_one(self, subscription: Subscription) -> Transaction:
        """Simulate one charge against ``subscription``.

        Eligibility is the caller's concern. On success the subscription's
        next billing date advances one interval from the processing time; on
        failure it is left unchanged so the next sweep retries.

        Raises
        ------
        StoreWriteError
            If persisting the charge fails. The transaction is re-persisted
            as failed first, on a best-effort basis.
        """
        with self._lock_for(subscription.subscription_id):
            return self._charge(subscription)

    def _charge(self, subscription: Subscription) -> Transaction:
        logger.info("Processing payment for subscription %s", subscription.subscription_id)
        now = self._clock()

        transaction = Transaction(
            transaction_id=self._ids.transaction_id(),
            subscription_id=subscription.subscription_id,
            donor_id=subscription.donor_id,
            amount=subscription.amount,
            currency=subscription.currency,
            status=TransactionStatus.PENDING,
            processed_at=now,
            campaign_description=subscription.campaign_description,
        )

        context = self._log_context(transaction)
        succeeded = self._draw() < self.success_rate
        previous_billing_date = subscription.next_billing_date
        try:
            if succeeded:
                transaction.status = TransactionStatus.COMPLETED
                logger.info(
                    "Payment successful for subscription %s: %s %s",
                    subscription.subscription_id,
                    subscription.amount,
                    subscription.currency.value,
                    extra=context,
                )
            else:
                transaction.status = TransactionStatus.FAILED
                logger.warning(
                    "Payment failed for subscription %s: %s %s",
                    subscription.subscription_id,
                    subscription.amount,
                    subscription.currency.value,
                    extra=context,
                )

            self.store.put_transaction(transaction)

            if succeeded:
                subscription.next_billing_date = next_billing_date(subscription.interval, now)
                self.store.put_subscription(subscription)
        except StoreWriteError:
            logger.exception(
                "Error processing payment for subscription %s",
                subscription.subscription_id,
                extra=context,
            )
            subscription.next_billing_date = previous_billing_date
            transaction.status = TransactionStatus.FAILED
            try:
                self.store.put_transaction(transaction)
            except StoreWriteError:
                logger.error(
                    "Could not record failed transaction %s", transaction.transaction_id
                )
            raise

        self._publish(transaction)
        return transaction

    def _publish(self, transaction: Transaction) -> None:
        """Send a stored transaction to the sink.

        The charge is already recorded, so publishing errors are logged and
        never change its outcome.
        """
        if self._sink is None:
            return
        try:
            self._sink.send("transactions", transaction)
        except SinkError as exc:
            logger.error(
                "Could not publish transaction %s: %s",
                transaction.transaction_id,
                exc,
                extra=self._log_context(transaction),
            )
        except Exception:
            logger.exception(
                "Unexpected error publishing transaction %s",
                transaction.transaction_id,
                extra=self._log_context(transaction),
            )

    @staticmethod
    def _log_context(transaction: Transaction) -> dict[str, str]:
        return {
            "subscription_id": transaction.subscription_id,
            "transaction_id": transaction.transaction_id,
            "donor_id": transaction.donor_id,
        }

    def due_subscriptions(self) -> list[Subscription]:
        """Active subscriptions whose billing date has been reached."""
        now = self._clock()
        return [sub for sub in self.store.list_active_subscriptions() if self.is_due(sub, now)]

    def sweep(self) -> SweepResult:
        """Charge every due subscription once, in store listing order.

        A failure on one subscription is counted as failed and does not stop
        the sweep. A subscription already advanced by a concurrent sweep is
        skipped and not counted.
        """
        logger.info("Starting batch payment processing...")

        due = self.due_subscriptions()
        if not due:
            logger.info("No subscriptions due for billing")
            return SweepResult()

        logger.info("Processing %d due subscriptions", len(due))
        result = SweepResult()

        for subscription in due:
            with self._lock_for(subscription.subscription_id):
                if not self.is_due(subscription, self._clock()):
                    logger.debug(
                        "Subscription %s no longer due, skipping", subscription.subscription_id
                    )
                    continue

                result.processed += 1
                try:
                    transaction = self._charge(subscription)
                except Exception:
                    logger.exception(
                        "Failed to process subscription %s", subscription.subscription_id
                    )
                    result.failed += 1
                    continue

            if transaction.is_completed:
                result.successful += 1
                result.total_amount += subscription.amount
            else:
                result.failed += 1

        logger.info(
            "Batch processing completed: processed=%d successful=%d failed=%d total=%s",
            result.processed,
            result.successful,
            result.failed,
            result.total_amount,
        )
        return result

    def statistics(self) -> PaymentStatistics:
        """Counts and amounts over every stored transaction."""
        transactions = self.store.list_transactions()
        successful = [txn for txn in transactions if txn.status == TransactionStatus.COMPLETED]
        failed = [txn for txn in transactions if txn.status == TransactionStatus.FAILED]
        total = sum((txn.amount for txn in successful), Decimal("0"))

        return PaymentStatistics(
            total_transactions=len(transactions),
            successful_transactions=len(successful),
            failed_transactions=len(failed),
            total_amount_processed=total,
            average_transaction_amount=mean_amount(total, len(successful)),
        )
