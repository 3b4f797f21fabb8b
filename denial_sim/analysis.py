"""
Dataset analyzer: one scan of the generated population.

Produces status counts, the monthly denial tally, payer-rule violation
counts and the confusion matrix of the simulated classifier. Everything
in the report that depends on population totals is derived from here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

import numpy as np
import pandas as pd

from .config import SimulationConfig
from .schemas import CLAIM_STATUSES, ConfusionMatrix, STATUS_DENIED, STATUS_NO_RESPONSE
from .scoring import PredictionStrategy, make_strategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DatasetAnalysis:
    status_counts: Dict[str, int]
    monthly_denials: Dict[str, Dict[str, int]]   # "<year>-<month>" -> {total, denied}
    rule_violations: Dict[int, int]
    confusion_matrix: ConfusionMatrix
    total_claims: int = 0
    predictions: Optional[np.ndarray] = field(default=None, repr=False, compare=False)


def month_key(year: int, month: int) -> str:
    return f"{year}-{month}"


def parse_month_key(key: str):
    year, month = key.split("-")
    return int(year), int(month)


# ---------------- Tallies ---------------- #

def count_statuses(claims: pd.DataFrame) -> Dict[str, int]:
    counts = claims["status"].value_counts().reindex(list(CLAIM_STATUSES), fill_value=0)
    return {status: int(n) for status, n in counts.items()}


def monthly_denials(claims: pd.DataFrame) -> Dict[str, Dict[str, int]]:
    """Total and denied claims per submission month, chronological."""
    if claims.empty:
        return {}
    frame = pd.DataFrame(
        {
            "year": claims["submission_date"].map(lambda d: d.year),
            "month": claims["submission_date"].map(lambda d: d.month),
            "denied": (claims["status"] == STATUS_DENIED).astype(int),
        }
    )
    grouped = frame.groupby(["year", "month"], sort=True)["denied"].agg(["size", "sum"])
    return {
        month_key(year, month): {"total": int(row["size"]), "denied": int(row["sum"])}
        for (year, month), row in grouped.iterrows()
    }


def count_rule_violations(
    claims: pd.DataFrame,
    rule_ids: Optional[Iterable[int]] = None,
) -> Dict[int, int]:
    """Claims containing each rule id. Known rules with no violation count 0."""
    exploded = claims["payer_rules_violated"].explode().dropna()
    counts = exploded.astype(int).value_counts()
    ids = sorted(set(counts.index.tolist()) | set(rule_ids or ()))
    return {int(rid): int(counts.get(rid, 0)) for rid in ids}


# ---------------- Confusion matrix ---------------- #

def compute_confusion_matrix(predicted: np.ndarray, actual: np.ndarray) -> ConfusionMatrix:
    """Quadrants for boolean predicted/actual "denied" arrays."""
    predicted = np.asarray(predicted, dtype=bool)
    actual = np.asarray(actual, dtype=bool)
    return ConfusionMatrix(
        true_positives=int(np.sum(predicted & actual)),
        false_positives=int(np.sum(predicted & ~actual)),
        true_negatives=int(np.sum(~predicted & ~actual)),
        false_negatives=int(np.sum(~predicted & actual)),
    )


def analyze_dataset(
    claims: pd.DataFrame,
    cfg: Optional[SimulationConfig] = None,
    rng: Optional[np.random.Generator] = None,
    strategy: Optional[PredictionStrategy] = None,
) -> DatasetAnalysis:
    """Aggregate the population.

    The confusion matrix uses ``strategy`` (default: the configured
    confusion strategy, normally ExactReuse) and treats a predicted
    probability above the decision threshold as "predicted denied".
    """
    cfg = cfg or SimulationConfig()
    if strategy is None:
        strategy = make_strategy(cfg.confusion_strategy, cfg.prediction_noise)
    if rng is None:
        rng = np.random.default_rng(cfg.seed)

    predictions = strategy.predict(claims, rng) if len(claims) else np.array([], dtype=float)
    predicted = predictions > cfg.decision_threshold
    actual = (claims["status"] == STATUS_DENIED).to_numpy()

    if cfg.confusion_population == "adjudicated":
        scored = (claims["status"] != STATUS_NO_RESPONSE).to_numpy()
        predicted, actual = predicted[scored], actual[scored]

    matrix = compute_confusion_matrix(predicted, actual)
    analysis = DatasetAnalysis(
        status_counts=count_statuses(claims),
        monthly_denials=monthly_denials(claims),
        rule_violations=count_rule_violations(
            claims, (r.id for r in cfg.catalogs.payer_rules)
        ),
        confusion_matrix=matrix,
        total_claims=len(claims),
        predictions=predictions,
    )
    logger.info(
        "analyzed %d claims: %s; confusion TP=%d FP=%d TN=%d FN=%d (%s strategy)",
        len(claims),
        analysis.status_counts,
        matrix.true_positives,
        matrix.false_positives,
        matrix.true_negatives,
        matrix.false_negatives,
        strategy.name,
    )
    return analysis
