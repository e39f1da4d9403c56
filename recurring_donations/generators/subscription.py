"""Synthetic subscription request generator."""

import random
from decimal import Decimal
from typing import Iterator

from recurring_donations.generators.base import BaseGenerator
from recurring_donations.generators.pool import FakerPool
from recurring_donations.models import CreateSubscriptionRequest, Currency, SubscriptionInterval


class SubscriptionRequestGenerator(BaseGenerator):
    """Generate plausible create-subscription requests."""

    INTERVALS = list(SubscriptionInterval)
    INTERVAL_WEIGHTS = [0.10, 0.20, 0.55, 0.15]

    CURRENCIES = list(Currency)
    CURRENCY_WEIGHTS = [0.50, 0.20, 0.15, 0.10, 0.05]

    # Typical single-charge size per cadence, scaled by a Pareto draw.
    AMOUNT_SCALE = {
        SubscriptionInterval.DAILY: 2,
        SubscriptionInterval.WEEKLY: 10,
        SubscriptionInterval.MONTHLY: 25,
        SubscriptionInterval.YEARLY: 200,
    }
    AMOUNT_CAP = 10000

    CAMPAIGN_TEMPLATES = [
        "Emergency disaster relief for families displaced by flooding in {city}",
        "Daily food distribution for homeless shelters in {city}",
        "Clean water wells for rural villages supported by {company}",
        "School supplies and education programs for kids in {city}",
        "Mobile medical clinics bringing health care to {city}",
        "After-school mentoring for children at risk in {city}",
        "Community garden and hunger relief pantry run by {company}",
        "Animal shelter operating costs for {company} rescue",
        "Arts scholarships for young musicians in {city}",
    ]

    def __init__(self, seed: int | None = None, pool: FakerPool | None = None) -> None:
        super().__init__(seed, pool=pool)

    def generate(self, donor_id: str | None = None) -> CreateSubscriptionRequest:
        """Generate a single request.

        Parameters
        ----------
        donor_id : str | None
            Donor to attach; a random donor from the pool when omitted.

        Returns
        -------
        CreateSubscriptionRequest
            Valid request with a positive 2-decimal amount.
        """
        interval = random.choices(self.INTERVALS, weights=self.INTERVAL_WEIGHTS, k=1)[0]
        currency = random.choices(self.CURRENCIES, weights=self.CURRENCY_WEIGHTS, k=1)[0]

        # Pareto: many small pledges, a few large ones
        amount = random.paretovariate(1.5) * self.AMOUNT_SCALE[interval]
        amount = round(min(amount, self.AMOUNT_CAP), 2)

        description = random.choice(self.CAMPAIGN_TEMPLATES).format(
            city=self.pool.city(),
            company=self.pool.company(),
        )

        return CreateSubscriptionRequest(
            donor_id=donor_id or self.pool.donor_id(),
            amount=Decimal(str(amount)),
            currency=currency,
            interval=interval,
            campaign_description=description,
        )

    def generate_batch(self, count: int) -> Iterator[CreateSubscriptionRequest]:
        """Generate multiple requests.

        Parameters
        ----------
        count : int
            Number of requests to generate.

        Yields
        ------
        CreateSubscriptionRequest
            Generated request.
        """
        for _ in range(count):
            yield self.generate()
