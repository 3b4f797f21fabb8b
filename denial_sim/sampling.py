"""
Sampling helpers.

Every helper takes an explicit ``numpy.random.Generator``; nothing here
touches a process-wide random source, so a run is reproducible from its
seed alone.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Sequence, TypeVar

import numpy as np

from .errors import InvalidCatalog

T = TypeVar("T")


def weighted_choice(entries: Sequence[T], rng: np.random.Generator) -> T:
    """Pick one catalog entry with P(entry) = weight / sum(weights).

    Entries only need a ``weight`` attribute. Zero-weight entries are never
    returned. If rounding keeps the running draw above zero after the last
    subtraction, the last weighted entry is returned.
    """
    if not entries:
        raise InvalidCatalog("cannot sample from an empty catalog")

    total = float(sum(e.weight for e in entries))
    if not total > 0:
        raise InvalidCatalog(f"catalog total weight must be positive, got {total}")

    draw = rng.random() * total
    for entry in entries:
        if entry.weight <= 0:
            continue
        draw -= entry.weight
        if draw <= 0:
            return entry
    return next(e for e in reversed(entries) if e.weight > 0)


def random_int(low: int, high: int, rng: np.random.Generator) -> int:
    """Uniform integer in [low, high] (both inclusive)."""
    return int(rng.integers(low, high + 1))


def uniform(low: float, high: float, rng: np.random.Generator) -> float:
    return float(rng.uniform(low, high))


def random_date(start: date, end: date, rng: np.random.Generator) -> date:
    """Uniform calendar day in [start, end]."""
    delta_days = (end - start).days
    return start + timedelta(days=random_int(0, delta_days, rng))
