#!/usr/bin/env python3
"""Simulate recurring billing over a span of days.

Creates synthetic subscriptions, advances a simulated clock one step at a
time and runs a billing sweep after each step. Transactions can be streamed
to Kafka as they are created; the final data set is exported to the console
and/or JSON files.
"""

import argparse
import logging
import time
from datetime import timedelta

from recurring_donations.config import DonationsConfig, KafkaConfig
from recurring_donations.logging import setup_logging
from recurring_donations.scenarios import BillingSimulationScenario
from recurring_donations.sinks import ConsoleSink, JsonFileSink, KafkaSink

logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point."""
    env_config = DonationsConfig.from_env()

    parser = argparse.ArgumentParser(description="Simulate recurring donation billing")
    parser.add_argument(
        "--subscriptions",
        type=int,
        default=100,
        help="Number of subscriptions to create (default: 100)",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=30,
        help="Simulated days to bill (default: 30)",
    )
    parser.add_argument(
        "--step-hours",
        type=float,
        default=1.0,
        help="Simulated hours between sweeps (default: 1)",
    )
    parser.add_argument(
        "--success-rate",
        type=float,
        default=env_config.billing.success_rate,
        help="Probability a simulated charge completes (default: 0.95)",
    )
    parser.add_argument(
        "--cancel-rate",
        type=float,
        default=0.0,
        help="Share of subscriptions cancelled halfway through (default: 0)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=env_config.seed if env_config.seed is not None else 42,
        help="Random seed for reproducibility (default: 42)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Write JSON files to this directory",
    )
    parser.add_argument(
        "--console",
        action="store_true",
        help="Print the exported data to stdout",
    )
    parser.add_argument(
        "--kafka-bootstrap",
        type=str,
        default=None,
        help="Stream transactions to Kafka at these bootstrap servers",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=env_config.log_level,
        help="Log level (default: INFO)",
    )
    args = parser.parse_args()

    setup_logging(level=args.log_level, format_type=env_config.log_format)

    kafka_sink = None
    if args.kafka_bootstrap:
        kafka_sink = KafkaSink(
            KafkaConfig(
                bootstrap_servers=args.kafka_bootstrap,
                topic_prefix=env_config.kafka.topic_prefix,
            )
        )

    logger.info("=" * 60)
    logger.info("Recurring Donations - Billing Simulation")
    logger.info("=" * 60)
    logger.info("Subscriptions: %d", args.subscriptions)
    logger.info("Days: %d (sweep every %.1fh)", args.days, args.step_hours)
    logger.info("Success rate: %.2f", args.success_rate)
    logger.info("Seed: %d", args.seed)

    start = time.perf_counter()

    scenario = BillingSimulationScenario(
        num_subscriptions=args.subscriptions,
        days=args.days,
        step=timedelta(hours=args.step_hours),
        success_rate=args.success_rate,
        deactivation_rate=args.cancel_rate,
        seed=args.seed,
        sink=kafka_sink,
    )
    scenario.generate()
    scenario.run()

    sinks: list = []
    if args.console:
        sinks.append(ConsoleSink(pretty=False, max_records=10))
    if args.output_dir:
        sinks.append(JsonFileSink(args.output_dir, pretty=env_config.output.pretty_json))
    scenario.export(sinks)

    for sink in sinks:
        sink.close()
    if kafka_sink is not None:
        kafka_sink.close()

    totals = scenario.totals()
    stats = scenario.app.transactions.statistics()
    logger.info("=" * 60)
    logger.info("Sweeps: %d", len(scenario.results))
    logger.info("Charges: %d (successful=%d, failed=%d)", totals.processed, totals.successful, totals.failed)
    logger.info("Total amount processed: %s", stats.total_amount_processed)
    logger.info("Average donation: %s", stats.average_transaction_amount)
    logger.info("Elapsed: %.2fs", time.perf_counter() - start)


if __name__ == "__main__":
    main()
