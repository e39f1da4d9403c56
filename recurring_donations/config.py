"""Configuration management for recurring-donations."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from recurring_donations.exceptions import ConfigurationError


@dataclass
class BillingConfig:
    """Payment simulation and scheduler cadence."""

    success_rate: float = 0.95
    sweep_interval_seconds: float = 3600.0
    stats_interval_seconds: float = 86400.0


@dataclass
class KafkaConfig:
    """Kafka producer configuration."""

    bootstrap_servers: str = "localhost:9092"
    acks: str = "all"
    batch_size: int = 16384
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3
    topic_prefix: str = "donations"

    def to_dict(self) -> dict[str, Any]:
        """Convert to confluent-kafka config dict."""
        return {
            "bootstrap.servers": self.bootstrap_servers,
            "acks": self.acks,
            "batch.size": self.batch_size,
            "linger.ms": self.linger_ms,
            "compression.type": self.compression,
            "retries": self.retries,
        }


@dataclass
class OutputConfig:
    """Output configuration."""

    json_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class DonationsConfig:
    """Main configuration for recurring-donations."""

    billing: BillingConfig = field(default_factory=BillingConfig)
    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    seed: int | None = None
    log_level: str = "INFO"
    log_format: str = "standard"

    def validate(self) -> None:
        """Raise ConfigurationError when a setting is out of range."""
        if not 0.0 <= self.billing.success_rate <= 1.0:
            raise ConfigurationError(
                f"success_rate must be within [0, 1], got {self.billing.success_rate}"
            )
        if self.billing.sweep_interval_seconds <= 0:
            raise ConfigurationError("sweep_interval_seconds must be positive")
        if self.billing.stats_interval_seconds <= 0:
            raise ConfigurationError("stats_interval_seconds must be positive")
        if self.log_format not in ("standard", "json"):
            raise ConfigurationError(f"Unknown log format: {self.log_format}")

    @classmethod
    def from_env(cls) -> "DonationsConfig":
        """Create config from environment variables."""
        import os

        try:
            billing = BillingConfig(
                success_rate=float(os.getenv("BILLING_SUCCESS_RATE", "0.95")),
                sweep_interval_seconds=float(os.getenv("SWEEP_INTERVAL_SECONDS", "3600")),
                stats_interval_seconds=float(os.getenv("STATS_INTERVAL_SECONDS", "86400")),
            )
            seed = int(os.getenv("SEED")) if os.getenv("SEED") else None
        except ValueError as exc:
            raise ConfigurationError(f"Invalid numeric setting: {exc}") from exc

        kafka = KafkaConfig(
            bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
            acks=os.getenv("KAFKA_ACKS", "all"),
            topic_prefix=os.getenv("TOPIC_PREFIX", "donations"),
        )

        output = OutputConfig(
            json_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        config = cls(
            billing=billing,
            kafka=kafka,
            output=output,
            seed=seed,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )
        config.validate()
        return config
