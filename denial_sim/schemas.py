"""
Schema definitions for the entities of the claim-denial simulation.

These schemas define the **contract** between:
- the reference catalogs and claim generation
- the dataset analyzer
- the report generator and any downstream consumer

Catalog entries and claims are frozen: a claim's status and denial
probability are fixed by the generation pass that created it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Tuple

from .errors import UNDEFINED_METRIC, is_undefined, safe_ratio


# ---------------- Claim statuses ---------------- #

STATUS_PAID = "Paid"
STATUS_DENIED = "Denied"
STATUS_NO_RESPONSE = "No Response"

CLAIM_STATUSES: Tuple[str, ...] = (STATUS_PAID, STATUS_DENIED, STATUS_NO_RESPONSE)


# ---------------- Reference catalog entries ---------------- #

@dataclass(frozen=True)
class PayerRule:
    id: int
    name: str
    weight: float       # independent inclusion / denial impact


@dataclass(frozen=True)
class CptRange:
    min: int
    max: int            # inclusive
    category: str
    weight: float

    def contains(self, code: int) -> bool:
        return self.min <= code <= self.max


@dataclass(frozen=True)
class Icd10Prefix:
    prefix: str         # single letter
    category: str
    weight: float


@dataclass(frozen=True)
class Payer:
    name: str
    weight: float


@dataclass(frozen=True)
class Specialty:
    name: str
    weight: float


# ---------------- Claim ---------------- #

@dataclass(frozen=True)
class Claim:
    claim_id: int
    submission_date: date
    payer: str
    specialty: str
    cpt_code: int
    icd10_code: str                       # e.g. "J45.1"
    payer_rules_violated: Tuple[int, ...]
    amount_billed: float
    patient_age: int
    patient_gender: str                   # "M" / "F"
    denial_probability: float             # [0.05, 0.95]
    status: str                           # Paid / Denied / No Response

    @property
    def month_key(self) -> Tuple[int, int]:
        return (self.submission_date.year, self.submission_date.month)

    @property
    def is_denied(self) -> bool:
        return self.status == STATUS_DENIED


# ---------------- Classifier validation ---------------- #

@dataclass(frozen=True)
class ConfusionMatrix:
    """Quadrant counts for "denied" as the positive class.

    Derived metrics are NaN when their denominator is zero.
    """

    true_positives: int = 0
    false_positives: int = 0
    true_negatives: int = 0
    false_negatives: int = 0

    @property
    def total(self) -> int:
        return (
            self.true_positives
            + self.false_positives
            + self.true_negatives
            + self.false_negatives
        )

    @property
    def precision(self) -> float:
        return safe_ratio(self.true_positives, self.true_positives + self.false_positives)

    @property
    def recall(self) -> float:
        return safe_ratio(self.true_positives, self.true_positives + self.false_negatives)

    @property
    def f1_score(self) -> float:
        p, r = self.precision, self.recall
        if is_undefined(p) or is_undefined(r):
            return UNDEFINED_METRIC
        return safe_ratio(2 * p * r, p + r)

    @property
    def accuracy(self) -> float:
        return safe_ratio(self.true_positives + self.true_negatives, self.total)
