"""Custom exception hierarchy for recurring-donations."""


class DonationsError(Exception):
    """Base exception for all recurring-donations errors."""


class EntityNotFoundError(DonationsError):
    """Raised when a referenced entity does not exist."""


class SubscriptionNotFoundError(EntityNotFoundError):
    """Raised when a subscription id is unknown and the caller requires one."""


class ValidationError(DonationsError):
    """Raised when a create request is malformed."""


class AnalyzerUnavailableError(DonationsError):
    """Raised by analyzer backends that cannot produce an analysis."""


class StoreWriteError(DonationsError):
    """Raised when a store write fails."""


class ConfigurationError(DonationsError):
    """Raised when configuration is invalid or missing."""


class SinkError(DonationsError):
    """Raised when a sink operation fails."""
