"""
denial_sim: synthetic claim-denial simulation and validation.

Generates a population of healthcare claims with feature-correlated
denial probabilities, then re-derives trend, feature-importance,
classifier and financial-impact statistics from it.
"""

from .config import SimulationConfig, DenialRateBand, AutomationWorkflow, FinancialAssumptions
from .catalogs import ReferenceCatalogs
from .errors import (
    DenialSimError,
    InvalidConfiguration,
    InvalidCatalog,
    LookupFailure,
    UNDEFINED_METRIC,
    is_undefined,
)
from .pipeline import SimulationRun, run_simulation, simulate, report_to_json

__version__ = "0.1.0"

__all__ = [
    "SimulationConfig",
    "DenialRateBand",
    "AutomationWorkflow",
    "FinancialAssumptions",
    "ReferenceCatalogs",
    "DenialSimError",
    "InvalidConfiguration",
    "InvalidCatalog",
    "LookupFailure",
    "UNDEFINED_METRIC",
    "is_undefined",
    "SimulationRun",
    "run_simulation",
    "simulate",
    "report_to_json",
]
