"""Output sinks for transactions, sweep results and statistics."""

from recurring_donations.sinks.console import ConsoleSink
from recurring_donations.sinks.json_file import JsonFileSink
from recurring_donations.sinks.kafka import KafkaSink

__all__ = ["ConsoleSink", "JsonFileSink", "KafkaSink"]
