"""Subscription models for recurring donations."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from recurring_donations.exceptions import ValidationError
from recurring_donations.models.enums import Currency, SubscriptionInterval, UrgencyLevel


@dataclass(frozen=True)
class CampaignAnalysis:
    """Tags, summary, category and urgency derived from a campaign description."""

    tags: tuple[str, ...]
    summary: str
    category: str | None = None
    urgency: UrgencyLevel | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CampaignAnalysis":
        """Build an analysis from a loosely typed backend response.

        Unknown urgency values are dropped rather than rejected.
        """
        urgency = data.get("urgency")
        try:
            urgency = UrgencyLevel(urgency) if urgency is not None else None
        except ValueError:
            urgency = None

        return cls(
            tags=tuple(str(tag) for tag in data.get("tags") or ()),
            summary=str(data.get("summary") or ""),
            category=data.get("category"),
            urgency=urgency,
        )


@dataclass
class Subscription:
    """Donor-defined recurring pledge.

    Only ``is_active`` (via deactivation) and ``next_billing_date`` (via a
    successful charge) change after creation.
    """

    subscription_id: str
    donor_id: str
    amount: Decimal
    currency: Currency
    interval: SubscriptionInterval
    campaign_description: str
    campaign_analysis: CampaignAnalysis
    created_at: datetime
    next_billing_date: datetime
    is_active: bool = True


@dataclass
class CreateSubscriptionRequest:
    """Validated input for creating a subscription."""

    donor_id: str
    amount: Decimal
    currency: Currency
    interval: SubscriptionInterval
    campaign_description: str

    def __post_init__(self) -> None:
        if not self.donor_id or not self.donor_id.strip():
            raise ValidationError("donor_id must not be empty")
        if not self.campaign_description or not self.campaign_description.strip():
            raise ValidationError("campaign_description must not be empty")
        if self.amount <= 0:
            raise ValidationError(f"amount must be positive, got {self.amount}")
        try:
            self.currency = Currency(self.currency)
            self.interval = SubscriptionInterval(self.interval)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CreateSubscriptionRequest":
        """Parse a raw request body into a validated request.

        Accepts both ``donorId``/``campaignDescription`` and snake_case keys.

        Raises
        ------
        ValidationError
            If a field is missing, the amount is not a positive number or
            the currency/interval is not one of the supported values.
        """

        def pick(snake: str, camel: str) -> Any:
            value = data.get(snake, data.get(camel))
            if value is None:
                raise ValidationError(f"Missing field: {camel}")
            return value

        raw_amount = pick("amount", "amount")
        if isinstance(raw_amount, bool):
            raise ValidationError("amount must be a number")
        try:
            amount = Decimal(str(raw_amount))
        except InvalidOperation as exc:
            raise ValidationError(f"amount must be a number, got {raw_amount!r}") from exc
        if not amount.is_finite():
            raise ValidationError(f"amount must be finite, got {raw_amount!r}")

        raw_currency = pick("currency", "currency")
        try:
            currency = Currency(str(raw_currency).upper())
        except ValueError as exc:
            raise ValidationError(f"Unsupported currency: {raw_currency}") from exc

        raw_interval = pick("interval", "interval")
        try:
            interval = SubscriptionInterval(str(raw_interval).lower())
        except ValueError as exc:
            raise ValidationError(f"Unsupported interval: {raw_interval}") from exc

        return cls(
            donor_id=str(pick("donor_id", "donorId")),
            amount=amount,
            currency=currency,
            interval=interval,
            campaign_description=str(pick("campaign_description", "campaignDescription")),
        )
