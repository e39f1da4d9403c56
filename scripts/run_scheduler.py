#!/usr/bin/env python3
"""Run the billing scheduler until interrupted.

Builds the app from environment variables, starts the hourly sweep and
daily statistics timers, and stops them cleanly on SIGINT or SIGTERM.
"""

import argparse
import logging
import signal
import threading

from recurring_donations.app import build_app
from recurring_donations.config import DonationsConfig
from recurring_donations.logging import setup_logging
from recurring_donations.sinks import KafkaSink
from recurring_donations.sinks.serialization import to_dict

logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Run the recurring donation billing scheduler")
    parser.add_argument(
        "--kafka",
        action="store_true",
        help="Publish transactions and statistics to Kafka (KAFKA_BOOTSTRAP_SERVERS)",
    )
    parser.add_argument(
        "--sweep-now",
        action="store_true",
        help="Run one sweep immediately after starting",
    )
    args = parser.parse_args()

    config = DonationsConfig.from_env()
    setup_logging(level=config.log_level, format_type=config.log_format)

    sink = KafkaSink(config.kafka) if args.kafka else None
    app = build_app(config, sink=sink, stats_sink=sink)

    shutdown = threading.Event()

    def _signal_handler(signum: int, frame: object) -> None:
        logger.info("Signal %d received, shutting down gracefully", signum)
        shutdown.set()

    original_sigint = signal.getsignal(signal.SIGINT)
    original_sigterm = signal.getsignal(signal.SIGTERM)
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    app.start()
    try:
        if args.sweep_now:
            logger.info("Initial sweep: %s", to_dict(app.scheduler.trigger_now()))
        shutdown.wait()
    finally:
        signal.signal(signal.SIGINT, original_sigint)
        signal.signal(signal.SIGTERM, original_sigterm)
        app.stop()
        if sink is not None:
            sink.close()
        logger.info("Final health: %s", to_dict(app.health_snapshot()))


if __name__ == "__main__":
    main()
