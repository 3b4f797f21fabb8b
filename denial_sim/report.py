"""
Report generator.

Turns the population and its analysis into the report object consumed by
presentation layers. Section and field names are camelCase and form the
contract with those consumers; do not rename them.

Rates are percentages rounded to one decimal. Undefined ratios (zero
denominator) are NaN and are left for the consumer to render.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from .analysis import DatasetAnalysis, parse_month_key
from .catalogs import ReferenceCatalogs
from .config import AutomationWorkflow, FinancialAssumptions, SimulationConfig
from .errors import UNDEFINED_METRIC, is_undefined, safe_ratio
from .schemas import (
    ConfusionMatrix,
    STATUS_DENIED,
    STATUS_NO_RESPONSE,
    STATUS_PAID,
)
from .scoring import make_strategy

logger = logging.getLogger(__name__)

RISK_BUCKETS = tuple(f"{lo}-{lo + 10}%" for lo in range(0, 100, 10))


def percent(numerator: float, denominator: float, digits: int = 1) -> float:
    ratio = safe_ratio(numerator, denominator)
    if is_undefined(ratio):
        return UNDEFINED_METRIC
    return round(ratio * 100, digits)


def _as_percent(ratio: float) -> float:
    return UNDEFINED_METRIC if is_undefined(ratio) else round(ratio * 100, 1)


def _by_rate_descending(rows: List[dict]) -> List[dict]:
    # stable; undefined rates sink to the bottom
    return sorted(
        rows,
        key=lambda r: (is_undefined(r["denialRate"]),
                       0.0 if is_undefined(r["denialRate"]) else -r["denialRate"]),
    )


# ---------------- Denial trends ---------------- #

def quarter_key(year: int, month: int) -> str:
    return f"{year}-Q{math.ceil(month / 3)}"


def denial_trends(monthly: Dict[str, Dict[str, int]]) -> Dict[str, list]:
    """Monthly and quarterly denial rates.

    Months are walked chronologically; a quarter bucket is flushed as
    soon as the quarter key changes.
    """
    months = sorted(monthly, key=parse_month_key)

    monthly_data = [
        {
            "month": key,
            "denialRate": percent(monthly[key]["denied"], monthly[key]["total"]),
            "totalClaims": monthly[key]["total"],
        }
        for key in months
    ]

    quarterly_data = []
    current, q_total, q_denied = None, 0, 0
    for key in months:
        quarter = quarter_key(*parse_month_key(key))
        if current is not None and quarter != current:
            quarterly_data.append(
                {"quarter": current, "denialRate": percent(q_denied, q_total), "totalClaims": q_total}
            )
            q_total, q_denied = 0, 0
        current = quarter
        q_total += monthly[key]["total"]
        q_denied += monthly[key]["denied"]

    if q_total > 0:
        quarterly_data.append(
            {"quarter": current, "denialRate": percent(q_denied, q_total), "totalClaims": q_total}
        )

    return {"monthlyData": monthly_data, "quarterlyData": quarterly_data}


# ---------------- Feature importance ---------------- #

def _denial_rate_by(claims: pd.DataFrame, column: str) -> pd.DataFrame:
    denied = (claims["status"] == STATUS_DENIED).astype(int)
    return denied.groupby(claims[column]).agg(["size", "sum"])


def feature_importance(
    claims: pd.DataFrame,
    analysis: DatasetAnalysis,
    catalogs: ReferenceCatalogs,
) -> Dict[str, list]:
    """Denial rate per payer rule, payer and specialty, highest first."""
    total_violations = sum(analysis.rule_violations.values())
    denied = (claims["status"] == STATUS_DENIED).to_numpy()
    rules_col = claims["payer_rules_violated"]

    rule_rows = []
    for rule_id, count in analysis.rule_violations.items():
        rule = catalogs.rule(rule_id)
        has_rule = rules_col.map(lambda rules, rid=rule_id: rid in rules).to_numpy(dtype=bool)
        rule_rows.append(
            {
                "ruleId": rule.id,
                "ruleName": rule.name,
                "violationCount": count,
                "percentOfViolations": percent(count, total_violations),
                "denialRate": percent(int(np.sum(denied & has_rule)), int(np.sum(has_rule))),
            }
        )

    payer_stats = _denial_rate_by(claims, "payer")
    payer_rows = []
    for payer in catalogs.payers:
        total = int(payer_stats["size"].get(payer.name, 0))
        n_denied = int(payer_stats["sum"].get(payer.name, 0))
        payer_rows.append(
            {"payerName": payer.name, "totalClaims": total, "denialRate": percent(n_denied, total)}
        )

    specialty_stats = _denial_rate_by(claims, "specialty")
    specialty_rows = []
    for specialty in catalogs.specialties:
        total = int(specialty_stats["size"].get(specialty.name, 0))
        n_denied = int(specialty_stats["sum"].get(specialty.name, 0))
        specialty_rows.append(
            {"specialtyName": specialty.name, "totalClaims": total, "denialRate": percent(n_denied, total)}
        )

    return {
        "ruleImportance": _by_rate_descending(rule_rows),
        "payerAnalysis": _by_rate_descending(payer_rows),
        "specialtyAnalysis": _by_rate_descending(specialty_rows),
    }


# ---------------- Risk distribution ---------------- #

def bucket_index(probability: float) -> int:
    """Floor binning into 10%-wide buckets; 1.0 lands in the last one."""
    # round off float noise so 0.7 is 70.0%, not 69.99...%
    pct = round(probability * 100, 12)
    return min(int(math.floor(pct / 10)), len(RISK_BUCKETS) - 1)


def risk_buckets(probabilities) -> Dict[str, int]:
    buckets = {label: 0 for label in RISK_BUCKETS}
    for p in probabilities:
        buckets[RISK_BUCKETS[bucket_index(float(p))]] += 1
    return buckets


def risk_distribution(
    claims: pd.DataFrame,
    predictions: np.ndarray,
    high_risk_threshold: float = 0.7,
) -> dict:
    risk_scores = [
        {"claimId": int(cid), "actualStatus": status, "predictedProbability": float(p)}
        for cid, status, p in zip(claims["claim_id"], claims["status"], predictions)
    ]

    high_risk = np.asarray(predictions) > high_risk_threshold
    actual_denied = (claims["status"] == STATUS_DENIED).to_numpy()
    count = int(np.sum(high_risk))
    denied_count = int(np.sum(high_risk & actual_denied))

    return {
        "riskScores": risk_scores,
        "riskBuckets": risk_buckets(predictions),
        "highRiskSummary": {
            "threshold": high_risk_threshold,
            "count": count,
            "deniedCount": denied_count,
            "accuracy": percent(denied_count, count),
        },
    }


# ---------------- Confusion matrix ---------------- #

def confusion_matrix_block(cm: ConfusionMatrix) -> dict:
    tp, fp, tn, fn = cm.true_positives, cm.false_positives, cm.true_negatives, cm.false_negatives
    matrix = [
        {"predicted": "Not Denied", "actual": "Not Denied", "count": tn,
         "type": "True Negative", "percentage": percent(tn, tn + fp)},
        {"predicted": "Denied", "actual": "Not Denied", "count": fp,
         "type": "False Positive", "percentage": percent(fp, tn + fp)},
        {"predicted": "Not Denied", "actual": "Denied", "count": fn,
         "type": "False Negative", "percentage": percent(fn, tp + fn)},
        {"predicted": "Denied", "actual": "Denied", "count": tp,
         "type": "True Positive", "percentage": percent(tp, tp + fn)},
    ]
    return {
        "matrix": matrix,
        "metrics": {
            "accuracy": _as_percent(cm.accuracy),
            "precision": _as_percent(cm.precision),
            "recall": _as_percent(cm.recall),
            "f1Score": _as_percent(cm.f1_score),
        },
    }


# ---------------- Automation & financial impact ---------------- #

def automation_analysis(
    rule_violations: Dict[int, int],
    workflows: List[AutomationWorkflow],
    financial: FinancialAssumptions,
) -> dict:
    """Labor and revenue savings of rule-targeted automation workflows."""
    performance = []
    total_labor, total_revenue = 0.0, 0.0

    for wf in workflows:
        processed = math.floor(rule_violations.get(wf.target_rule, 0) * wf.coverage_fraction)
        labor = (
            processed * financial.average_minutes_per_claim / 60
            * wf.time_reduction
            * financial.hourly_labor_rate
        )
        revenue = (
            processed * wf.success_rate
            * financial.average_claim_value * financial.at_risk_fraction
        )
        total_labor += labor
        total_revenue += revenue
        performance.append(
            {
                "name": wf.name,
                "targetRule": wf.target_rule,
                "claimsProcessed": processed,
                "successRate": round(wf.success_rate * 100, 1),
                "timeReduction": round(wf.time_reduction * 100, 1),
                "laborSaved": round(labor, 2),
                "revenueSaved": round(revenue, 2),
            }
        )

    return {
        "workflowPerformance": performance,
        "financialImpact": {
            "averageTimePerClaim": financial.average_minutes_per_claim,
            "laborRatePerHour": financial.hourly_labor_rate,
            "averageClaimValue": financial.average_claim_value,
            "atRiskFraction": financial.at_risk_fraction,
            "totalLaborSaved": round(total_labor, 2),
            "totalRevenueSaved": round(total_revenue, 2),
            "totalImpact": round(total_labor + total_revenue, 2),
        },
    }


# ---------------- Summary & validation ---------------- #

def dataset_summary(analysis: DatasetAnalysis, cfg: SimulationConfig) -> dict:
    counts, total = analysis.status_counts, analysis.total_claims
    return {
        "totalClaims": total,
        "dateRange": f"{cfg.start_date.isoformat()} to {cfg.end_date.isoformat()}",
        "statusBreakdown": {
            "paid": counts[STATUS_PAID],
            "denied": counts[STATUS_DENIED],
            "noResponse": counts[STATUS_NO_RESPONSE],
        },
        "percentages": {
            "paid": percent(counts[STATUS_PAID], total),
            "denied": percent(counts[STATUS_DENIED], total),
            "noResponse": percent(counts[STATUS_NO_RESPONSE], total),
        },
    }


def conclusion_validation(report: dict, cfg: SimulationConfig) -> dict:
    """Check the generated population against the configured targets."""
    rates = [
        m["denialRate"] for m in report["denialTrends"]["monthlyData"]
        if not is_undefined(m["denialRate"])
    ]
    band = cfg.target_denial_rate
    lo, hi = round(band.min * 100, 1), round(band.max * 100, 1)
    within = sum(1 for r in rates if lo <= r <= hi)

    # rules never violated have no rate to rank
    top_rules = [
        r for r in report["featureImportance"]["ruleImportance"]
        if not is_undefined(r["denialRate"])
    ][:3]
    return {
        "denialRateRange": {
            "min": min(rates) if rates else UNDEFINED_METRIC,
            "max": max(rates) if rates else UNDEFINED_METRIC,
        },
        "noResponseRate": report["datasetSummary"]["percentages"]["noResponse"],
        "topDenialFactors": [
            f"Rule {r['ruleId']} ({r['ruleName']}): {r['denialRate']}% denial rate"
            for r in top_rules
        ],
        "modelPerformance": report["confusionMatrix"]["metrics"],
        "highRiskIdentification": report["riskDistribution"]["highRiskSummary"],
        "targets": {
            "denialRate": {"min": lo, "max": hi},
            "noResponseRate": round(cfg.target_no_response_rate * 100, 1),
            "modelAccuracy": round(cfg.model_accuracy * 100, 1),
            "modelPrecision": round(cfg.model_precision * 100, 1),
            "modelRecall": round(cfg.model_recall * 100, 1),
        },
        "monthsWithinTargetBand": within,
        "monthsOutsideTargetBand": len(rates) - within,
    }


# ---------------- Report entrypoint ---------------- #

def generate_report(
    claims: pd.DataFrame,
    analysis: DatasetAnalysis,
    cfg: SimulationConfig,
    rng: np.random.Generator,
    risk_predictions: Optional[np.ndarray] = None,
) -> dict:
    """Assemble every report section.

    The risk distribution uses its own prediction strategy (normally the
    noisy one), independent of the analyzer's confusion matrix.
    """
    if risk_predictions is None:
        strategy = make_strategy(cfg.risk_strategy, cfg.prediction_noise)
        risk_predictions = strategy.predict(claims, rng) if len(claims) else np.array([])

    report = {
        "datasetSummary": dataset_summary(analysis, cfg),
        "denialTrends": denial_trends(analysis.monthly_denials),
        "featureImportance": feature_importance(claims, analysis, cfg.catalogs),
        "riskDistribution": risk_distribution(claims, risk_predictions, cfg.high_risk_threshold),
        "confusionMatrix": confusion_matrix_block(analysis.confusion_matrix),
        "automationAnalysis": automation_analysis(
            analysis.rule_violations, list(cfg.workflows), cfg.financial
        ),
    }
    report["conclusionValidation"] = conclusion_validation(report, cfg)

    logger.debug("report assembled with sections %s", list(report))
    return report
