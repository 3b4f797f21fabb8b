"""
Denial probability model and simulated classifier predictions.

The model is an additive score over six factors on top of the month's
base rate:

    p = clamp(base_rate
              + (payer.weight     - 0.45) * 0.5
              + (cpt_range.weight - 0.10) * 0.3
              + (icd_prefix.weight - 0.10) * 0.3
              + sum(rule.weight * 0.8 for violated rules)
              + (specialty.weight - 0.45) * 0.2
              + seasonal(month),
              0.05, 0.95)

Violated payer rules dominate the score.

Two prediction strategies re-read the generated population:

- ``ExactReuse``: the stored denial probability *is* the prediction, so
  the resulting classifier is near-perfect by construction.
- ``NoisyCorrelated``: an independent noisy score centred on 0.75 for
  denied claims and 0.25 otherwise, giving an imperfect but correlated
  classifier.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, Mapping, Optional

import numpy as np
import pandas as pd

from . import config
from .catalogs import ReferenceCatalogs
from .errors import InvalidConfiguration
from .schemas import Claim, STATUS_DENIED

# ---------------- Model coefficients ---------------- #

PAYER_CENTER, PAYER_SCALE = 0.45, 0.5
CPT_CENTER, CPT_SCALE = 0.10, 0.3
ICD_CENTER, ICD_SCALE = 0.10, 0.3
RULE_SCALE = 0.8
SPECIALTY_CENTER, SPECIALTY_SCALE = 0.45, 0.2

MIN_PROBABILITY = 0.05
MAX_PROBABILITY = 0.95

FACTOR_NAMES = ("payer", "cpt", "icd", "rules", "specialty", "seasonal")


def clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


class DenialProbabilityModel:
    """Deterministic six-factor denial score for one claim."""

    def __init__(
        self,
        catalogs: ReferenceCatalogs,
        seasonality: Optional[Mapping[int, float]] = None,
    ):
        self.catalogs = catalogs
        self.seasonality = dict(config.CLAIM_SEASONALITY if seasonality is None else seasonality)

    def contributions(
        self,
        *,
        payer: str,
        specialty: str,
        cpt_code: int,
        icd10_code: str,
        payer_rules_violated: Iterable[int],
        submission_date: date,
    ) -> Dict[str, float]:
        """Additive term of each factor, keyed by FACTOR_NAMES."""
        cats = self.catalogs
        return {
            "payer": (cats.payer(payer).weight - PAYER_CENTER) * PAYER_SCALE,
            "cpt": (cats.cpt_range(cpt_code).weight - CPT_CENTER) * CPT_SCALE,
            "icd": (cats.icd10_prefix(icd10_code).weight - ICD_CENTER) * ICD_SCALE,
            "rules": sum(cats.rule(rid).weight * RULE_SCALE for rid in payer_rules_violated),
            "specialty": (cats.specialty(specialty).weight - SPECIALTY_CENTER) * SPECIALTY_SCALE,
            "seasonal": self.seasonality.get(submission_date.month, 0.0),
        }

    def score(self, base_rate: float, **features) -> float:
        terms = self.contributions(**features)
        return clamp(base_rate + sum(terms.values()), MIN_PROBABILITY, MAX_PROBABILITY)

    def score_claim(self, claim: Claim, base_rate: float) -> float:
        """Recompute a claim's probability (used for validation only)."""
        return self.score(
            base_rate,
            payer=claim.payer,
            specialty=claim.specialty,
            cpt_code=claim.cpt_code,
            icd10_code=claim.icd10_code,
            payer_rules_violated=claim.payer_rules_violated,
            submission_date=claim.submission_date,
        )


# ---------------- Prediction strategies ---------------- #

class PredictionStrategy:
    """Produces a predicted denial probability per claim row."""

    name = "base"

    def predict(self, claims: pd.DataFrame, rng: np.random.Generator) -> np.ndarray:
        raise NotImplementedError


class ExactReuse(PredictionStrategy):
    name = "exact"

    def predict(self, claims: pd.DataFrame, rng: np.random.Generator) -> np.ndarray:
        return claims["denial_probability"].to_numpy(dtype=float, copy=True)


class NoisyCorrelated(PredictionStrategy):
    name = "noisy"

    def __init__(self, noise: float = config.PREDICTION_NOISE,
                 denied_center: float = 0.75, other_center: float = 0.25):
        self.noise = noise
        self.denied_center = denied_center
        self.other_center = other_center

    def predict(self, claims: pd.DataFrame, rng: np.random.Generator) -> np.ndarray:
        denied = (claims["status"] == STATUS_DENIED).to_numpy()
        noise = rng.uniform(-self.noise, self.noise, size=len(claims))
        centers = np.where(denied, self.denied_center, self.other_center)
        return np.clip(centers + noise, 0.0, 1.0)


def make_strategy(name: str, noise: float = config.PREDICTION_NOISE) -> PredictionStrategy:
    if name == ExactReuse.name:
        return ExactReuse()
    if name == NoisyCorrelated.name:
        return NoisyCorrelated(noise=noise)
    raise InvalidConfiguration(f"unknown prediction strategy {name!r}")
