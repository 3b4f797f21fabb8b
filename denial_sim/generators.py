"""
Core synthetic data generators for the claim-denial simulation.

Design goals:
- Monthly denial rates stay inside the configured target band.
- Payer, procedure, diagnosis, specialty and payer-rule violations
  actually move a claim's denial probability.
- Winter and summer months deny more, spring and fall less.
- A fixed share of claims never receives a payer response.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from .config import RULE_VIOLATION_FACTOR, SimulationConfig
from .errors import LookupFailure
from .sampling import random_date, random_int, uniform, weighted_choice
from .schemas import (
    Claim,
    STATUS_DENIED,
    STATUS_NO_RESPONSE,
    STATUS_PAID,
)
from .scoring import DenialProbabilityModel, clamp

logger = logging.getLogger(__name__)

MonthKey = Tuple[int, int]

CLAIM_COLUMNS = [
    "claim_id",
    "submission_date",
    "payer",
    "specialty",
    "cpt_code",
    "icd10_code",
    "payer_rules_violated",
    "amount_billed",
    "patient_age",
    "patient_gender",
    "denial_probability",
    "status",
]


# ---------------- Monthly base rates ---------------- #

def month_keys(start: date, end: date) -> List[MonthKey]:
    """Every (year, month) touched by [start, end], in order."""
    months = pd.period_range(
        pd.Period(year=start.year, month=start.month, freq="M"),
        pd.Period(year=end.year, month=end.month, freq="M"),
        freq="M",
    )
    return [(p.year, p.month) for p in months]


def generate_monthly_base_rates(
    cfg: SimulationConfig,
    rng: np.random.Generator,
) -> Dict[MonthKey, float]:
    """Baseline denial probability per calendar month.

    base = base_rate + seasonal(month) + uniform(-jitter, +jitter),
    clamped to [band.min + headroom, band.max - headroom].
    """
    band = cfg.target_denial_rate
    low = band.min + cfg.base_rate_headroom
    high = band.max - cfg.base_rate_headroom

    rates: Dict[MonthKey, float] = {}
    for year, month in month_keys(cfg.start_date, cfg.end_date):
        base = cfg.base_rate + cfg.base_rate_seasonality.get(month, 0.0)
        base += uniform(-cfg.base_rate_jitter, cfg.base_rate_jitter, rng)
        rates[(year, month)] = clamp(base, low, high)

    logger.debug("generated base rates for %d months", len(rates))
    return rates


# ---------------- Claims ---------------- #

def _icd10_code(prefix: str, rng: np.random.Generator) -> str:
    return f"{prefix}{random_int(10, 99, rng)}.{random_int(0, 9, rng)}"


def _violated_rules(cfg: SimulationConfig, rng: np.random.Generator) -> Tuple[int, ...]:
    return tuple(
        rule.id
        for rule in cfg.catalogs.payer_rules
        if rng.random() < rule.weight * RULE_VIOLATION_FACTOR
    )


def assign_status(
    denial_probability: float,
    no_response_rate: float,
    rng: np.random.Generator,
) -> str:
    """No Response check first (independent of the model), then Denied/Paid."""
    if rng.random() < no_response_rate:
        return STATUS_NO_RESPONSE
    if rng.random() < denial_probability:
        return STATUS_DENIED
    return STATUS_PAID


def generate_claim(
    claim_id: int,
    cfg: SimulationConfig,
    base_rates: Dict[MonthKey, float],
    rng: np.random.Generator,
    model: Optional[DenialProbabilityModel] = None,
) -> Claim:
    """Build one claim, score it, and fix its status."""
    if model is None:
        model = DenialProbabilityModel(cfg.catalogs, cfg.claim_seasonality)
    cats = cfg.catalogs

    submission_date = random_date(cfg.start_date, cfg.end_date, rng)
    key = (submission_date.year, submission_date.month)
    if key not in base_rates:
        raise LookupFailure("monthly base rate", f"{key[0]}-{key[1]}")
    base_rate = base_rates[key]

    payer = weighted_choice(cats.payers, rng).name
    specialty = weighted_choice(cats.specialties, rng).name
    cpt = weighted_choice(cats.cpt_ranges, rng)
    cpt_code = random_int(cpt.min, cpt.max, rng)
    icd10_code = _icd10_code(weighted_choice(cats.icd10_prefixes, rng).prefix, rng)
    rules = _violated_rules(cfg, rng)

    # auxiliary attributes, never scored
    amount_billed = random_int(500, 15_000, rng) + rng.random() * 100
    patient_age = random_int(18, 85, rng)
    patient_gender = "M" if rng.random() < 0.5 else "F"

    denial_probability = model.score(
        base_rate,
        payer=payer,
        specialty=specialty,
        cpt_code=cpt_code,
        icd10_code=icd10_code,
        payer_rules_violated=rules,
        submission_date=submission_date,
    )
    status = assign_status(denial_probability, cfg.target_no_response_rate, rng)

    return Claim(
        claim_id=claim_id,
        submission_date=submission_date,
        payer=payer,
        specialty=specialty,
        cpt_code=cpt_code,
        icd10_code=icd10_code,
        payer_rules_violated=rules,
        amount_billed=float(amount_billed),
        patient_age=patient_age,
        patient_gender=patient_gender,
        denial_probability=float(denial_probability),
        status=status,
    )


def generate_claims(
    cfg: SimulationConfig,
    rng: np.random.Generator,
    base_rates: Optional[Dict[MonthKey, float]] = None,
) -> List[Claim]:
    """Generate the full population, claim ids 1..total_claims."""
    if base_rates is None:
        base_rates = generate_monthly_base_rates(cfg, rng)
    model = DenialProbabilityModel(cfg.catalogs, cfg.claim_seasonality)

    claims = [
        generate_claim(claim_id, cfg, base_rates, rng, model)
        for claim_id in range(1, cfg.total_claims + 1)
    ]
    logger.info("generated %d claims over %d months", len(claims), len(base_rates))
    return claims


def claims_to_frame(claims: List[Claim]) -> pd.DataFrame:
    """One row per claim, rule ids kept as tuples."""
    if not claims:
        return pd.DataFrame(columns=CLAIM_COLUMNS)
    return pd.DataFrame(
        [{col: getattr(c, col) for col in CLAIM_COLUMNS} for c in claims],
        columns=CLAIM_COLUMNS,
    )
