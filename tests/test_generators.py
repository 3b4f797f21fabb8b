"""
Tests for monthly base rates and claim generation.
"""

import dataclasses
import re
from datetime import date

import numpy as np
import pytest

from denial_sim.catalogs import ReferenceCatalogs, PAYER_RULES, PAYERS, SPECIALTIES, CPT_CODE_RANGES, ICD10_PREFIXES
from denial_sim.config import SimulationConfig
from denial_sim.errors import LookupFailure
from denial_sim.generators import (
    assign_status,
    claims_to_frame,
    generate_claim,
    generate_claims,
    generate_monthly_base_rates,
    month_keys,
)
from denial_sim.schemas import CLAIM_STATUSES, STATUS_DENIED, STATUS_NO_RESPONSE, STATUS_PAID
from denial_sim.scoring import DenialProbabilityModel

ICD10_PATTERN = re.compile(r"^[A-Z]\d{2}\.\d$")


class TestMonthKeys:

    def test_partial_first_and_last_month_included(self):
        keys = month_keys(date(2022, 1, 31), date(2022, 3, 1))
        assert keys == [(2022, 1), (2022, 2), (2022, 3)]

    def test_default_horizon_has_36_months(self):
        cfg = SimulationConfig()
        keys = month_keys(cfg.start_date, cfg.end_date)
        assert len(keys) == 36
        assert keys[0] == (2022, 1)
        assert keys[-1] == (2024, 12)


class TestMonthlyBaseRates:

    def test_every_rate_inside_target_band(self):
        cfg = SimulationConfig()
        for seed in range(5):
            rates = generate_monthly_base_rates(cfg, np.random.default_rng(seed))
            band = cfg.target_denial_rate
            assert all(band.min < r < band.max for r in rates.values())
            assert all(
                band.min + cfg.base_rate_headroom - 1e-12 <= r <= band.max - cfg.base_rate_headroom + 1e-12
                for r in rates.values()
            )

    def test_seasonal_shape_without_jitter(self, rng):
        cfg = SimulationConfig(
            start_date=date(2023, 1, 1), end_date=date(2023, 12, 31), base_rate_jitter=0.0
        )
        rates = generate_monthly_base_rates(cfg, rng)

        assert rates[(2023, 12)] == pytest.approx(0.54)   # 0.55 clamped to 0.59 - 0.05
        assert rates[(2023, 7)] == pytest.approx(0.53)
        assert rates[(2023, 4)] == pytest.approx(0.44)
        assert rates[(2023, 10)] == pytest.approx(0.45)
        assert rates[(2023, 3)] == pytest.approx(0.48)

    def test_narrow_band_clamps(self, rng):
        cfg = SimulationConfig(
            target_denial_rate=dataclasses.replace(SimulationConfig().target_denial_rate, min=0.40, max=0.52)
        )
        rates = generate_monthly_base_rates(cfg, rng)
        assert min(rates.values()) >= 0.45 - 1e-12
        assert max(rates.values()) <= 0.47 + 1e-12


class TestAssignStatus:

    def test_no_response_takes_priority(self, fixed_rng):
        assert assign_status(0.95, 0.125, fixed_rng(0.01)) == STATUS_NO_RESPONSE

    def test_denied_when_draw_below_probability(self, fixed_rng):
        assert assign_status(0.6, 0.125, fixed_rng(0.5, 0.59)) == STATUS_DENIED

    def test_paid_otherwise(self, fixed_rng):
        assert assign_status(0.6, 0.125, fixed_rng(0.5, 0.6)) == STATUS_PAID


class TestGenerateClaims:

    def test_population_shape(self, small_config, rng):
        claims = generate_claims(small_config, rng)

        assert [c.claim_id for c in claims] == list(range(1, small_config.total_claims + 1))
        assert all(c.status in CLAIM_STATUSES for c in claims)
        assert all(0.05 <= c.denial_probability <= 0.95 for c in claims)
        assert all(small_config.start_date <= c.submission_date <= small_config.end_date for c in claims)

    def test_attribute_domains(self, small_config, rng):
        cats = small_config.catalogs
        payers = {p.name for p in cats.payers}
        specialties = {s.name for s in cats.specialties}
        rule_ids = {r.id for r in cats.payer_rules}

        for c in generate_claims(small_config, rng):
            assert c.payer in payers
            assert c.specialty in specialties
            assert ICD10_PATTERN.match(c.icd10_code)
            assert any(r.contains(c.cpt_code) for r in cats.cpt_ranges)
            assert list(c.payer_rules_violated) == sorted(set(c.payer_rules_violated))
            assert set(c.payer_rules_violated) <= rule_ids
            assert 18 <= c.patient_age <= 85
            assert c.patient_gender in ("M", "F")
            assert 500 <= c.amount_billed < 15_100

    def test_stored_probability_matches_model(self, small_config, rng):
        base_rates = generate_monthly_base_rates(small_config, rng)
        claims = generate_claims(small_config, rng, base_rates)
        model = DenialProbabilityModel(small_config.catalogs, small_config.claim_seasonality)

        for c in claims[:100]:
            assert c.denial_probability == pytest.approx(
                model.score_claim(c, base_rates[c.month_key])
            )

    def test_all_no_response(self, rng):
        cfg = SimulationConfig(total_claims=100, target_no_response_rate=1.0)
        claims = generate_claims(cfg, rng)
        assert {c.status for c in claims} == {STATUS_NO_RESPONSE}

    def test_neutral_catalogs_cluster_on_base_rate(self, rng):
        cats = ReferenceCatalogs(
            payer_rules=tuple(dataclasses.replace(r, weight=0.0) for r in PAYER_RULES),
            cpt_ranges=tuple(dataclasses.replace(r, weight=0.10) for r in CPT_CODE_RANGES),
            icd10_prefixes=tuple(dataclasses.replace(p, weight=0.10) for p in ICD10_PREFIXES),
            payers=tuple(dataclasses.replace(p, weight=0.45) for p in PAYERS),
            specialties=tuple(dataclasses.replace(s, weight=0.45) for s in SPECIALTIES),
        )
        cfg = SimulationConfig(catalogs=cats, target_no_response_rate=0.0, total_claims=400)
        base_rates = generate_monthly_base_rates(cfg, rng)
        claims = generate_claims(cfg, rng, base_rates)

        for c in claims:
            assert c.payer_rules_violated == ()
            seasonal = cfg.claim_seasonality.get(c.submission_date.month, 0.0)
            assert c.denial_probability == pytest.approx(base_rates[c.month_key] + seasonal)
        assert {c.status for c in claims} <= {STATUS_PAID, STATUS_DENIED}

    def test_missing_month_fails_loudly(self, small_config, rng):
        with pytest.raises(LookupFailure):
            generate_claim(1, small_config, {}, rng)

    def test_claims_are_immutable(self, small_config, rng):
        claim = generate_claims(dataclasses.replace(small_config, total_claims=1), rng)[0]
        with pytest.raises(dataclasses.FrozenInstanceError):
            claim.status = STATUS_PAID


class TestClaimsToFrame:

    def test_one_row_per_claim(self, small_config, rng):
        claims = generate_claims(small_config, rng)
        frame = claims_to_frame(claims)

        assert len(frame) == len(claims)
        assert frame["claim_id"].tolist() == [c.claim_id for c in claims]
        assert frame["payer_rules_violated"].iloc[0] == claims[0].payer_rules_violated

    def test_empty(self):
        assert claims_to_frame([]).empty
