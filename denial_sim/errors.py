"""
Error taxonomy for the denial simulation engine.

Configuration problems abort a run before any claim is generated.
Catalog and base-rate misses are internal-consistency failures and are
never defaulted away. Undefined classifier metrics are *not* errors:
they travel through the report as NaN.
"""

from __future__ import annotations

import math


class DenialSimError(Exception):
    """Base class for every error raised by the simulation engine."""


class InvalidConfiguration(DenialSimError, ValueError):
    """Configuration rejected before generation starts."""


class InvalidCatalog(DenialSimError, ValueError):
    """A weighted catalog cannot be sampled (empty or zero total weight)."""


class LookupFailure(DenialSimError, KeyError):
    """A claim references a catalog key (or month) that does not exist."""

    def __init__(self, kind: str, key: object):
        self.kind = kind
        self.key = key
        super().__init__(f"no {kind} entry for {key!r}")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return self.args[0]


# ---------------- Undefined metrics ---------------- #

UNDEFINED_METRIC: float = float("nan")


def is_undefined(value: float) -> bool:
    """True when a metric had a zero denominator."""
    return isinstance(value, float) and math.isnan(value)


def safe_ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator, or UNDEFINED_METRIC when the denominator is zero."""
    if denominator == 0:
        return UNDEFINED_METRIC
    return numerator / denominator
