"""
Programmatic entry point: configuration in, report out.

    from denial_sim import SimulationConfig, run_simulation
    report = run_simulation(SimulationConfig(seed=7, total_claims=2_000))

One ``numpy.random.Generator`` seeded from ``config.seed`` is threaded
through base-rate generation, claim generation, the analyzer and the
report, in that order, so equal configurations give identical reports.
Nothing here prints or writes files.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from .analysis import DatasetAnalysis, analyze_dataset
from .config import SimulationConfig
from .generators import MonthKey, claims_to_frame, generate_claims, generate_monthly_base_rates
from .report import generate_report
from .schemas import Claim

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationRun:
    """Every artifact of one run, for callers that need more than the report."""

    config: SimulationConfig
    base_rates: Dict[MonthKey, float]
    claims: List[Claim]
    frame: pd.DataFrame
    analysis: DatasetAnalysis
    report: dict


def simulate(config: Optional[SimulationConfig] = None, **overrides) -> SimulationRun:
    cfg = config or SimulationConfig()
    if overrides:
        cfg = dataclasses.replace(cfg, **overrides)
    cfg.validate()

    logger.info(
        "simulating %d claims from %s to %s (seed=%d)",
        cfg.total_claims, cfg.start_date, cfg.end_date, cfg.seed,
    )
    rng = np.random.default_rng(cfg.seed)

    base_rates = generate_monthly_base_rates(cfg, rng)
    claims = generate_claims(cfg, rng, base_rates)
    frame = claims_to_frame(claims)
    analysis = analyze_dataset(frame, cfg, rng)
    report = generate_report(frame, analysis, cfg, rng)

    return SimulationRun(
        config=cfg,
        base_rates=base_rates,
        claims=claims,
        frame=frame,
        analysis=analysis,
        report=report,
    )


def run_simulation(config: Optional[SimulationConfig] = None, **overrides) -> dict:
    """Generate, analyze and report; returns the report object."""
    return simulate(config, **overrides).report


def report_to_json(report: dict, indent: Optional[int] = 2) -> str:
    # NaN marks undefined metrics and is kept as-is
    return json.dumps(report, indent=indent, allow_nan=True)
