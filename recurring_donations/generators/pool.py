"""Identifier generation and pre-generated Faker value pools.

``IdGenerator`` hands out prefixed, globally unique identifiers from a
batch-generated UUID pool::

    ids = IdGenerator()
    ids.subscription_id()   # "sub_3f2a..."
    ids.transaction_id()    # "txn_9b1c..."

``FakerPool`` replaces per-call Faker invocations with ``random.choice``
lookups for the synthetic donor data used by scenarios.
"""

from __future__ import annotations

import os
import random
import threading
import uuid as _uuid

from faker import Faker


class UUIDPool:
    """Batch-generated UUIDs using os.urandom for minimal syscall overhead.

    Pre-generates batches of UUIDs by reading ``os.urandom(16 * batch_size)``
    once and slicing into hex strings. ``next()`` is thread-safe.

    Parameters
    ----------
    batch_size : int
        Number of UUIDs to generate per batch (default 1024).
    """

    __slots__ = ("_batch_size", "_pool", "_index", "_lock")

    def __init__(self, batch_size: int = 1024) -> None:
        self._batch_size = batch_size
        self._pool: list[str] = []
        self._index = 0
        self._lock = threading.Lock()
        self._refill()

    def _refill(self) -> None:
        """Generate a new batch of UUIDs."""
        raw = os.urandom(16 * self._batch_size)
        self._pool = [
            _uuid.UUID(bytes=raw[i : i + 16], version=4).hex
            for i in range(0, len(raw), 16)
        ]
        self._index = 0

    def next(self) -> str:
        """Return next UUID hex string, refilling pool when exhausted."""
        with self._lock:
            if self._index >= len(self._pool):
                self._refill()
            val = self._pool[self._index]
            self._index += 1
            return val


class IdGenerator:
    """Prefixed opaque identifiers for subscriptions and transactions."""

    SUBSCRIPTION_PREFIX = "sub"
    TRANSACTION_PREFIX = "txn"

    def __init__(self, pool: UUIDPool | None = None) -> None:
        self._pool = pool or UUIDPool()

    def subscription_id(self) -> str:
        return f"{self.SUBSCRIPTION_PREFIX}_{self._pool.next()}"

    def transaction_id(self) -> str:
        return f"{self.TRANSACTION_PREFIX}_{self._pool.next()}"


class FakerPool:
    """Pre-generated pools of Faker values for fast random selection.

    Parameters
    ----------
    locale : str
        Faker locale (default ``en_US``).
    seed : int | None
        Random seed for reproducibility.
    pool_sizes : dict[str, int] | None
        Override default pool sizes per field.
    """

    DEFAULT_SIZES: dict[str, int] = {
        "donor": 500,
        "city": 200,
        "company": 200,
    }

    def __init__(
        self,
        locale: str = "en_US",
        seed: int | None = None,
        pool_sizes: dict[str, int] | None = None,
    ) -> None:
        sizes = {**self.DEFAULT_SIZES, **(pool_sizes or {})}
        fake = Faker(locale)
        if seed is not None:
            fake.seed_instance(seed)
            random.seed(seed)

        self._donors: list[str] = [fake.user_name() for _ in range(sizes["donor"])]
        self._cities: list[str] = [fake.city() for _ in range(sizes["city"])]
        self._companies: list[str] = [fake.company() for _ in range(sizes["company"])]

    def donor_id(self) -> str:
        """Return a random donor handle."""
        return f"donor-{random.choice(self._donors)}"

    def city(self) -> str:
        """Return a random city name."""
        return random.choice(self._cities)

    def company(self) -> str:
        """Return a random organisation name."""
        return random.choice(self._companies)
