"""
Tests for the dataset analyzer.
"""

import dataclasses
from datetime import date

import numpy as np
import pandas as pd
import pytest

from denial_sim.analysis import (
    analyze_dataset,
    compute_confusion_matrix,
    count_rule_violations,
    count_statuses,
    monthly_denials,
)
from denial_sim.errors import is_undefined
from denial_sim.generators import claims_to_frame
from denial_sim.schemas import Claim, ConfusionMatrix


def _claim(claim_id, when, status, probability, rules=()):
    return Claim(
        claim_id=claim_id,
        submission_date=when,
        payer="Aetna",
        specialty="Cardiology",
        cpt_code=70001,
        icd10_code="I10.0",
        payer_rules_violated=tuple(rules),
        amount_billed=1000.0,
        patient_age=50,
        patient_gender="F",
        denial_probability=probability,
        status=status,
    )


@pytest.fixture
def frame():
    claims = [
        _claim(1, date(2023, 1, 5), "Denied", 0.80, (1, 4)),
        _claim(2, date(2023, 1, 20), "Paid", 0.30, (4,)),
        _claim(3, date(2023, 2, 2), "Denied", 0.40),
        _claim(4, date(2023, 10, 9), "No Response", 0.70, (5,)),
        _claim(5, date(2023, 10, 9), "Paid", 0.60),
    ]
    return claims_to_frame(claims)


class TestConfusionMatrix:

    def test_quadrants(self):
        predicted = np.array([True, True, False, False, True])
        actual = np.array([True, False, False, True, True])
        cm = compute_confusion_matrix(predicted, actual)

        assert (cm.true_positives, cm.false_positives, cm.true_negatives, cm.false_negatives) == (2, 1, 1, 1)
        assert cm.total == 5
        assert cm.precision == pytest.approx(2 / 3)
        assert cm.recall == pytest.approx(2 / 3)
        assert cm.f1_score == pytest.approx(2 / 3)
        assert cm.accuracy == pytest.approx(3 / 5)

    def test_zero_denominators_are_undefined(self):
        cm = ConfusionMatrix(true_negatives=10)
        assert is_undefined(cm.precision)
        assert is_undefined(cm.recall)
        assert is_undefined(cm.f1_score)
        assert cm.accuracy == 1.0

    def test_all_zero_matrix(self):
        cm = compute_confusion_matrix(np.array([], dtype=bool), np.array([], dtype=bool))
        assert cm.total == 0
        assert is_undefined(cm.accuracy)

    def test_zero_precision_and_recall_gives_undefined_f1(self):
        cm = ConfusionMatrix(false_positives=3, false_negatives=2)
        assert cm.precision == 0.0
        assert cm.recall == 0.0
        assert is_undefined(cm.f1_score)


class TestTallies:

    def test_status_counts_zero_filled(self, frame):
        counts = count_statuses(frame.iloc[:2])
        assert counts == {"Paid": 1, "Denied": 1, "No Response": 0}

    def test_monthly_denials_keys_and_order(self, frame):
        monthly = monthly_denials(frame)
        assert list(monthly) == ["2023-1", "2023-2", "2023-10"]
        assert monthly["2023-1"] == {"total": 2, "denied": 1}
        assert monthly["2023-10"] == {"total": 2, "denied": 0}

    def test_rule_violations(self, frame):
        assert count_rule_violations(frame) == {1: 1, 4: 2, 5: 1}

    def test_rule_violations_zero_fill_known_rules(self, frame):
        counts = count_rule_violations(frame, rule_ids=[1, 2, 4, 5])
        assert counts[2] == 0


class TestAnalyzeDataset:

    def test_exact_reuse_confusion(self, frame, small_config):
        analysis = analyze_dataset(frame, small_config)
        cm = analysis.confusion_matrix

        # predicted: 0.8, 0.7, 0.6 > 0.5 ; actual denied: claims 1 and 3
        assert (cm.true_positives, cm.false_positives, cm.true_negatives, cm.false_negatives) == (1, 2, 1, 1)
        assert cm.total == len(frame)
        assert sum(analysis.status_counts.values()) == len(frame)

    def test_adjudicated_population_skips_no_response(self, frame, small_config):
        cfg = dataclasses.replace(small_config, confusion_population="adjudicated")
        cm = analyze_dataset(frame, cfg).confusion_matrix
        assert cm.total == 4
        assert cm.false_positives == 1

    def test_generated_population(self, small_run):
        analysis = small_run.analysis
        total = small_run.config.total_claims

        assert sum(analysis.status_counts.values()) == total
        assert analysis.confusion_matrix.total == total
        assert sum(m["total"] for m in analysis.monthly_denials.values()) == total
        assert set(analysis.rule_violations) == {r.id for r in small_run.config.catalogs.payer_rules}

    def test_exact_reuse_matches_stored_probabilities(self, small_run):
        frame = small_run.frame
        predicted = (frame["denial_probability"] > 0.5).to_numpy()
        actual = (frame["status"] == "Denied").to_numpy()

        assert small_run.analysis.confusion_matrix == compute_confusion_matrix(predicted, actual)
