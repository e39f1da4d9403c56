"""Tests for the payment engine."""

import logging
import random
import shutil
import threading
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from recurring_donations.billing.engine import PaymentEngine
from recurring_donations.clock import SimulatedClock
from recurring_donations.exceptions import SinkError, StoreWriteError
from recurring_donations.models import SubscriptionInterval, TransactionStatus
from recurring_donations.sinks.json_file import JsonFileSink
from recurring_donations.store import DonationStore


def make_engine(store, clock, rng, **kwargs) -> PaymentEngine:
    return PaymentEngine(store, rng=rng, clock=clock, **kwargs)


class TestChargeOne:
    """Tests for single charges."""

    def test_success_advances_billing_date(
        self, store: DonationStore, clock: SimulatedClock, t0: datetime,
        subscription_factory, sequence_random,
    ) -> None:
        """A completed charge moves the next date one interval past processing time."""
        sub = store.put_subscription(subscription_factory(next_billing_date=t0))
        clock.advance(timedelta(days=1))
        engine = make_engine(store, clock, sequence_random([0.0]))

        txn = engine.charge_one(sub)

        assert txn.status is TransactionStatus.COMPLETED
        assert txn.processed_at == t0 + timedelta(days=1)
        assert txn.amount == sub.amount
        assert txn.currency is sub.currency
        assert txn.donor_id == sub.donor_id
        assert txn.campaign_description == sub.campaign_description
        assert txn.transaction_id.startswith("txn_")
        assert store.get_subscription(sub.subscription_id).next_billing_date == t0 + timedelta(days=2)
        assert store.get_transaction(txn.transaction_id) is txn

    def test_failure_keeps_billing_date(
        self, store: DonationStore, clock: SimulatedClock, t0: datetime,
        subscription_factory, sequence_random,
    ) -> None:
        """A failed charge is stored and the date stays put for retry."""
        sub = store.put_subscription(subscription_factory(next_billing_date=t0))
        engine = make_engine(store, clock, sequence_random([0.99]))

        txn = engine.charge_one(sub)

        assert txn.status is TransactionStatus.FAILED
        assert sub.next_billing_date == t0
        assert store.count_transactions() == 1

    def test_threshold_is_strict(
        self, store: DonationStore, clock: SimulatedClock, subscription_factory, sequence_random
    ) -> None:
        """A draw equal to the success rate fails."""
        sub = store.put_subscription(subscription_factory())
        engine = make_engine(store, clock, sequence_random([0.95]))

        assert engine.charge_one(sub).status is TransactionStatus.FAILED

    def test_default_success_rate(self, store: DonationStore) -> None:
        """Engine defaults to a 95% success rate."""
        assert PaymentEngine(store).success_rate == 0.95
        assert PaymentEngine.SUCCESS_RATE == 0.95

    def test_store_write_error_marks_failed_and_reraises(
        self, clock: SimulatedClock, t0: datetime, subscription_factory, sequence_random
    ) -> None:
        """A failed subscription write restores the date and records the charge as failed."""
        store = DonationStore()
        sub = store.put_subscription(subscription_factory(next_billing_date=t0))
        engine = make_engine(store, clock, sequence_random([0.0]))

        with patch.object(store, "put_subscription", side_effect=StoreWriteError("disk full")):
            with pytest.raises(StoreWriteError):
                engine.charge_one(sub)

        assert sub.next_billing_date == t0
        [txn] = store.list_transactions()
        assert txn.status is TransactionStatus.FAILED

    def test_publishes_to_sink(
        self, store: DonationStore, clock: SimulatedClock, subscription_factory, sequence_random
    ) -> None:
        """Stored transactions are sent to the sink."""
        sink = MagicMock()
        sub = store.put_subscription(subscription_factory())
        engine = make_engine(store, clock, sequence_random([0.0]), sink=sink)

        txn = engine.charge_one(sub)

        sink.send.assert_called_once_with("transactions", txn)

    def test_sink_error_does_not_fail_charge(
        self, store: DonationStore, clock: SimulatedClock, subscription_factory, sequence_random
    ) -> None:
        """Sink failures are logged and the charge stands."""
        sink = MagicMock()
        sink.send.side_effect = SinkError("broker down")
        sub = store.put_subscription(subscription_factory())
        engine = make_engine(store, clock, sequence_random([0.0]), sink=sink)

        txn = engine.charge_one(sub)

        assert txn.status is TransactionStatus.COMPLETED
        assert store.count_transactions() == 1

    def test_sink_os_error_does_not_fail_charge(
        self, store: DonationStore, clock: SimulatedClock, t0: datetime,
        subscription_factory, sequence_random, caplog: pytest.LogCaptureFixture,
    ) -> None:
        """An unexpected I/O error from the sink is logged and the charge stands."""
        sink = MagicMock()
        sink.send.side_effect = OSError("disk gone")
        sub = store.put_subscription(subscription_factory(next_billing_date=t0))
        engine = make_engine(store, clock, sequence_random([0.0]), sink=sink)

        with caplog.at_level(logging.ERROR, logger="recurring_donations"):
            txn = engine.charge_one(sub)

        assert txn.status is TransactionStatus.COMPLETED
        assert sub.next_billing_date == t0 + timedelta(days=1)
        assert "Unexpected error publishing transaction" in caplog.text

    def test_log_records_carry_ids(
        self, store: DonationStore, clock: SimulatedClock,
        subscription_factory, sequence_random, caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Outcome log records expose subscription, transaction and donor ids."""
        sub = store.put_subscription(subscription_factory())
        engine = make_engine(store, clock, sequence_random([0.0]))

        with caplog.at_level(logging.INFO, logger="recurring_donations"):
            txn = engine.charge_one(sub)

        [record] = [r for r in caplog.records if r.getMessage().startswith("Payment successful")]
        assert record.subscription_id == sub.subscription_id
        assert record.transaction_id == txn.transaction_id
        assert record.donor_id == sub.donor_id


class TestSweep:
    """Tests for billing sweeps."""

    def test_empty_store(self, store: DonationStore, clock: SimulatedClock, sequence_random) -> None:
        """Nothing due yields a zero result."""
        result = make_engine(store, clock, sequence_random([0.0])).sweep()

        assert (result.processed, result.successful, result.failed) == (0, 0, 0)
        assert result.total_amount == Decimal("0")

    def test_skips_inactive_and_future(
        self, store: DonationStore, clock: SimulatedClock, t0: datetime,
        subscription_factory, sequence_random,
    ) -> None:
        """Only active subscriptions at or past their date are charged."""
        store.put_subscription(subscription_factory("due", next_billing_date=t0))
        store.put_subscription(subscription_factory("inactive", next_billing_date=t0, is_active=False))
        store.put_subscription(
            subscription_factory("future", next_billing_date=t0 + timedelta(seconds=1))
        )
        engine = make_engine(store, clock, sequence_random([0.0]))

        result = engine.sweep()

        assert result.processed == 1
        assert [t.subscription_id for t in store.list_transactions()] == ["due"]

    def test_counts_and_total(
        self, store: DonationStore, clock: SimulatedClock, subscription_factory, sequence_random
    ) -> None:
        """Totals include successful charges only."""
        store.put_subscription(subscription_factory("a", amount="10.00"))
        store.put_subscription(subscription_factory("b", amount="20.00"))
        store.put_subscription(subscription_factory("c", amount="5.50"))
        engine = make_engine(store, clock, sequence_random([0.0, 0.99, 0.1]))

        result = engine.sweep()

        assert result.processed == 3
        assert result.successful == 2
        assert result.failed == 1
        assert result.total_amount == Decimal("15.50")

    def test_second_sweep_charges_nothing(
        self, store: DonationStore, clock: SimulatedClock, subscription_factory, sequence_random
    ) -> None:
        """A successfully charged subscription is not due again until its next date."""
        store.put_subscription(subscription_factory())
        engine = make_engine(store, clock, sequence_random([0.0]))

        assert engine.sweep().processed == 1
        assert engine.sweep().processed == 0

    def test_failed_charge_retried_next_sweep(
        self, store: DonationStore, clock: SimulatedClock, subscription_factory, sequence_random
    ) -> None:
        """A failed charge remains due."""
        store.put_subscription(subscription_factory())
        engine = make_engine(store, clock, sequence_random([0.99, 0.0]))

        assert engine.sweep().failed == 1
        assert engine.sweep().successful == 1
        assert store.count_transactions() == 2

    def test_error_on_one_subscription_does_not_stop_sweep(
        self, store: DonationStore, clock: SimulatedClock, subscription_factory, sequence_random
    ) -> None:
        """An exception while charging counts as failed and the sweep continues."""
        store.put_subscription(subscription_factory("a"))
        store.put_subscription(subscription_factory("b"))
        engine = make_engine(store, clock, sequence_random([0.0]))
        original = store.put_transaction

        def flaky(txn):
            if txn.subscription_id == "a":
                raise StoreWriteError("boom")
            return original(txn)

        with patch.object(store, "put_transaction", side_effect=flaky):
            result = engine.sweep()

        assert result.processed == 2
        assert result.failed == 1
        assert result.successful == 1

    def test_sink_os_error_counts_as_successful(
        self, store: DonationStore, clock: SimulatedClock, t0: datetime,
        subscription_factory, sequence_random,
    ) -> None:
        """A completed charge whose publish raises OSError still counts as successful."""
        sink = MagicMock()
        sink.send.side_effect = OSError("disk gone")
        sub = store.put_subscription(subscription_factory(next_billing_date=t0))
        engine = make_engine(store, clock, sequence_random([0.0]), sink=sink)

        result = engine.sweep()

        assert (result.processed, result.successful, result.failed) == (1, 1, 0)
        assert result.total_amount == Decimal("10.00")
        assert sub.next_billing_date == t0 + timedelta(days=1)
        [txn] = store.list_transactions()
        assert txn.status is TransactionStatus.COMPLETED

    def test_missing_output_directory_counts_as_successful(
        self, store: DonationStore, clock: SimulatedClock, tmp_path: Path,
        subscription_factory, sequence_random,
    ) -> None:
        """A JSON file sink whose directory vanished does not turn charges into failures."""
        output_dir = tmp_path / "out"
        sink = JsonFileSink(output_dir)
        shutil.rmtree(output_dir)
        store.put_subscription(subscription_factory())
        engine = make_engine(store, clock, sequence_random([0.0]), sink=sink)

        result = engine.sweep()

        assert (result.processed, result.successful, result.failed) == (1, 1, 0)
        assert result.total_amount == Decimal("10.00")

    def test_success_rate_approximation(
        self, store: DonationStore, clock: SimulatedClock, subscription_factory
    ) -> None:
        """Roughly 95% of charges succeed with a seeded random source."""
        for i in range(1000):
            store.put_subscription(subscription_factory(f"sub_{i}"))
        engine = make_engine(store, clock, random.Random(42))

        result = engine.sweep()

        assert result.processed == 1000
        assert 920 <= result.successful <= 980
        assert result.successful + result.failed == 1000

    def test_concurrent_sweeps_charge_once(
        self, store: DonationStore, clock: SimulatedClock, subscription_factory, sequence_random
    ) -> None:
        """Overlapping sweeps never double-charge a subscription."""
        for i in range(200):
            store.put_subscription(
                subscription_factory(f"sub_{i}", interval=SubscriptionInterval.MONTHLY)
            )
        engine = make_engine(store, clock, sequence_random([0.0]))
        results = []

        def run() -> None:
            results.append(engine.sweep())

        threads = [threading.Thread(target=run) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sum(r.processed for r in results) == 200
        assert store.count_transactions() == 200


class TestStatistics:
    """Tests for payment statistics."""

    def test_empty(self, store: DonationStore) -> None:
        """No transactions means zero counts and a zero average."""
        stats = PaymentEngine(store).statistics()

        assert stats.total_transactions == 0
        assert stats.average_transaction_amount == Decimal("0")

    def test_amounts_from_completed_only(self, store: DonationStore, transaction_factory) -> None:
        """Failed transactions are counted but not summed."""
        store.put_transaction(transaction_factory("t1", amount="10.00"))
        store.put_transaction(transaction_factory("t2", amount="5.00"))
        store.put_transaction(
            transaction_factory("t3", amount="100.00", status=TransactionStatus.FAILED)
        )

        stats = PaymentEngine(store).statistics()

        assert stats.total_transactions == 3
        assert stats.successful_transactions == 2
        assert stats.failed_transactions == 1
        assert stats.total_amount_processed == Decimal("15.00")
        assert stats.average_transaction_amount == Decimal("7.50")
