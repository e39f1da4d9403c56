"""Base generator class for synthetic donation data."""

from __future__ import annotations

import random
from abc import ABC

from recurring_donations.generators.pool import FakerPool


class BaseGenerator(ABC):
    """Base class for all data generators.

    Provides seed-based reproducibility and a shared FakerPool.

    Parameters
    ----------
    seed : int | None
        Random seed for reproducibility.
    locale : str
        Faker locale (default ``en_US``).
    pool : FakerPool | None
        Pre-generated value pool.
    """

    def __init__(
        self,
        seed: int | None = None,
        locale: str = "en_US",
        pool: FakerPool | None = None,
    ) -> None:
        self.pool = pool or FakerPool(locale=locale, seed=seed)
        if seed is not None:
            random.seed(seed)
