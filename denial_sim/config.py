"""
Configuration for the synthetic claim-denial simulation.

The module-level constants are the defaults of the healthcare denial
prediction case study: 6,685 claims submitted between 31 Jan 2022 and
31 Dec 2024, a monthly denial rate between 37% and 59% and 12.5% of
claims never receiving a payer response.

`SimulationConfig` bundles them into one overridable object; every value
can be replaced per run, e.g. ``dataclasses.replace(cfg, seed=7)``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Tuple

from .catalogs import ReferenceCatalogs
from .errors import InvalidConfiguration

# ---------------- Population size & horizon ---------------- #

START_DATE: date = date(2022, 1, 31)
END_DATE: date = date(2024, 12, 31)  # inclusive
TOTAL_CLAIMS: int = 6_685


# ---------------- Target outcome metrics ---------------- #

TARGET_DENIAL_RATE_MIN: float = 0.37
TARGET_DENIAL_RATE_MAX: float = 0.59
TARGET_NO_RESPONSE_RATE: float = 0.125

# Documentation-only model targets (reported, never enforced)
MODEL_ACCURACY: float = 0.92
MODEL_PRECISION: float = 0.94
MODEL_RECALL: float = 0.94


# ---------------- Monthly base rate shape ---------------- #

BASE_DENIAL_RATE: float = 0.48        # midpoint of the target band
BASE_RATE_JITTER: float = 0.02        # uniform(-j, +j)
BASE_RATE_HEADROOM: float = 0.05      # distance kept from the band edges

# month -> additive adjustment of the monthly base rate
BASE_RATE_SEASONALITY: Dict[int, float] = {
    12: 0.07, 1: 0.07,     # winter spike
    7: 0.05, 8: 0.05,      # summer spike
    4: -0.04, 5: -0.04,    # spring dip
    10: -0.03, 11: -0.03,  # fall dip
}

# month -> additive per-claim seasonal term of the scoring model
CLAIM_SEASONALITY: Dict[int, float] = {
    12: 0.06, 1: 0.06,
    7: 0.04, 8: 0.04,
}


# ---------------- Prediction strategies ---------------- #

PREDICTION_STRATEGIES: Tuple[str, ...] = ("exact", "noisy")
CONFUSION_STRATEGY: str = "exact"     # analyzer confusion matrix
RISK_STRATEGY: str = "noisy"          # risk distribution section
PREDICTION_NOISE: float = 0.15        # half-width of the noisy strategy
DECISION_THRESHOLD: float = 0.5       # probability > threshold => predicted denied
HIGH_RISK_THRESHOLD: float = 0.7

# "all": every claim is scored; "adjudicated": No Response claims excluded
CONFUSION_POPULATIONS: Tuple[str, ...] = ("all", "adjudicated")
CONFUSION_POPULATION: str = "all"


# ---------------- Automation & financial impact ---------------- #

AVERAGE_MINUTES_PER_CLAIM: float = 22.5
HOURLY_LABOR_RATE: float = 35.00
AVERAGE_CLAIM_VALUE: float = 2_500.0
AT_RISK_FRACTION: float = 0.15


# ---------------- Payer rules ---------------- #

# P(claim violates rule) = rule.weight * RULE_VIOLATION_FACTOR
RULE_VIOLATION_FACTOR: float = 0.7


# ---------------- Random seed ---------------- #

SEED: int = 44


# ---------------- Structured configuration ---------------- #

@dataclass(frozen=True)
class DenialRateBand:
    min: float = TARGET_DENIAL_RATE_MIN
    max: float = TARGET_DENIAL_RATE_MAX

    def contains(self, rate: float) -> bool:
        return self.min <= rate <= self.max


@dataclass(frozen=True)
class AutomationWorkflow:
    """A named automation targeting one payer rule."""

    name: str
    target_rule: int
    coverage_fraction: float        # share of violating claims it handles
    success_rate: float
    time_reduction: float


AUTOMATION_WORKFLOWS: Tuple[AutomationWorkflow, ...] = (
    AutomationWorkflow("Pre-authorization Verification", 1, 0.80, 0.897, 0.834),
    AutomationWorkflow("Coding Mismatch Detection", 4, 0.75, 0.923, 0.769),
    AutomationWorkflow("Medical Necessity Documentation", 5, 0.65, 0.875, 0.712),
    AutomationWorkflow("Timely Filing Monitoring", 6, 0.90, 0.981, 0.915),
)


@dataclass(frozen=True)
class FinancialAssumptions:
    average_minutes_per_claim: float = AVERAGE_MINUTES_PER_CLAIM
    hourly_labor_rate: float = HOURLY_LABOR_RATE
    average_claim_value: float = AVERAGE_CLAIM_VALUE
    at_risk_fraction: float = AT_RISK_FRACTION


@dataclass(frozen=True)
class SimulationConfig:
    start_date: date = START_DATE
    end_date: date = END_DATE
    total_claims: int = TOTAL_CLAIMS
    target_denial_rate: DenialRateBand = field(default_factory=DenialRateBand)
    target_no_response_rate: float = TARGET_NO_RESPONSE_RATE
    model_accuracy: float = MODEL_ACCURACY
    model_precision: float = MODEL_PRECISION
    model_recall: float = MODEL_RECALL
    catalogs: ReferenceCatalogs = field(default_factory=ReferenceCatalogs)
    seed: int = SEED

    base_rate: float = BASE_DENIAL_RATE
    base_rate_jitter: float = BASE_RATE_JITTER
    base_rate_headroom: float = BASE_RATE_HEADROOM
    base_rate_seasonality: Dict[int, float] = field(default_factory=lambda: dict(BASE_RATE_SEASONALITY))
    claim_seasonality: Dict[int, float] = field(default_factory=lambda: dict(CLAIM_SEASONALITY))

    confusion_strategy: str = CONFUSION_STRATEGY
    risk_strategy: str = RISK_STRATEGY
    prediction_noise: float = PREDICTION_NOISE
    decision_threshold: float = DECISION_THRESHOLD
    high_risk_threshold: float = HIGH_RISK_THRESHOLD
    confusion_population: str = CONFUSION_POPULATION

    workflows: Tuple[AutomationWorkflow, ...] = AUTOMATION_WORKFLOWS
    financial: FinancialAssumptions = field(default_factory=FinancialAssumptions)

    def validate(self) -> "SimulationConfig":
        """Fail fast on anything that would make generation meaningless."""
        if self.start_date > self.end_date:
            raise InvalidConfiguration(
                f"start_date {self.start_date} is after end_date {self.end_date}"
            )
        if isinstance(self.total_claims, bool) or not isinstance(self.total_claims, int):
            raise InvalidConfiguration(f"total_claims must be an int, got {self.total_claims!r}")
        if self.total_claims <= 0:
            raise InvalidConfiguration(f"total_claims must be positive, got {self.total_claims}")

        band = self.target_denial_rate
        if not 0.0 <= band.min < band.max <= 1.0:
            raise InvalidConfiguration(f"invalid target denial band {band.min}..{band.max}")
        if self.base_rate_headroom <= 0:
            raise InvalidConfiguration("base_rate_headroom must be positive")
        if band.min + self.base_rate_headroom > band.max - self.base_rate_headroom:
            raise InvalidConfiguration(
                f"headroom {self.base_rate_headroom} leaves no room inside "
                f"target band {band.min}..{band.max}"
            )

        for name in ("target_no_response_rate", "prediction_noise",
                     "decision_threshold", "high_risk_threshold"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise InvalidConfiguration(f"{name} must be within [0, 1], got {value}")
        if self.base_rate_jitter < 0:
            raise InvalidConfiguration("base_rate_jitter must be non-negative")

        for name, strategy in (("confusion_strategy", self.confusion_strategy),
                               ("risk_strategy", self.risk_strategy)):
            if strategy not in PREDICTION_STRATEGIES:
                raise InvalidConfiguration(
                    f"{name} must be one of {PREDICTION_STRATEGIES}, got {strategy!r}"
                )
        if self.confusion_population not in CONFUSION_POPULATIONS:
            raise InvalidConfiguration(
                f"confusion_population must be one of {CONFUSION_POPULATIONS}, "
                f"got {self.confusion_population!r}"
            )

        self._validate_catalogs()

        rule_ids = {r.id for r in self.catalogs.payer_rules}
        for wf in self.workflows:
            if wf.target_rule not in rule_ids:
                raise InvalidConfiguration(
                    f"workflow {wf.name!r} targets unknown payer rule {wf.target_rule}"
                )
        return self

    def _validate_catalogs(self) -> None:
        for name, entries in self.catalogs.named_catalogs().items():
            if not entries:
                raise InvalidConfiguration(f"catalog {name!r} is empty")
            if any(e.weight < 0 for e in entries):
                raise InvalidConfiguration(f"catalog {name!r} has a negative weight")
            # rules are independent inclusions; everything else is sampled by weight
            if name != "payer_rules" and sum(e.weight for e in entries) <= 0:
                raise InvalidConfiguration(f"catalog {name!r} has zero total weight")
        if any(r.weight * RULE_VIOLATION_FACTOR > 1 for r in self.catalogs.payer_rules):
            raise InvalidConfiguration(
                f"payer rule weights must keep weight * {RULE_VIOLATION_FACTOR} <= 1"
            )
        if any(c.min > c.max for c in self.catalogs.cpt_ranges):
            raise InvalidConfiguration("CPT range with min > max")

