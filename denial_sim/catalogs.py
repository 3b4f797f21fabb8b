"""
Static weighted reference catalogs.

Weights are relative sampling weights for CPT ranges, ICD-10 prefixes,
payers and specialties, and independent inclusion probabilities for payer
rules. They also drive the denial probability model (see scoring.py).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple

from .errors import LookupFailure
from .schemas import CptRange, Icd10Prefix, Payer, PayerRule, Specialty


# ---------------- Default catalogs ---------------- #

PAYER_RULES: Tuple[PayerRule, ...] = (
    PayerRule(1, "Missing pre-authorization", 0.15),
    PayerRule(2, "Service not covered", 0.10),
    PayerRule(3, "Provider network status issues", 0.10),
    PayerRule(4, "Coding mismatches", 0.20),
    PayerRule(5, "Medical necessity documentation", 0.18),
    PayerRule(6, "Timely filing violation", 0.17),
    PayerRule(7, "Patient eligibility issues", 0.12),
    PayerRule(8, "Duplicate claim detection", 0.09),
    PayerRule(9, "Bundling/unbundling errors", 0.08),
)

CPT_CODE_RANGES: Tuple[CptRange, ...] = (
    CptRange(10000, 19999, "Anesthesia", 0.05),
    CptRange(20000, 29999, "Surgery", 0.15),
    CptRange(30000, 39999, "Surgery", 0.10),
    CptRange(40000, 49999, "Surgery", 0.10),
    CptRange(50000, 59999, "Surgery", 0.10),
    CptRange(60000, 69999, "Surgery", 0.10),
    CptRange(70000, 79999, "Radiology", 0.15),
    CptRange(80000, 89999, "Pathology/Laboratory", 0.10),
    CptRange(90000, 99999, "E/M and Medicine", 0.15),
)

ICD10_PREFIXES: Tuple[Icd10Prefix, ...] = (
    Icd10Prefix("A", "Infectious and parasitic diseases", 0.05),
    Icd10Prefix("C", "Neoplasms", 0.10),
    Icd10Prefix("E", "Endocrine, nutritional and metabolic diseases", 0.10),
    Icd10Prefix("F", "Mental and behavioral disorders", 0.15),
    Icd10Prefix("G", "Diseases of the nervous system", 0.10),
    Icd10Prefix("I", "Diseases of the circulatory system", 0.15),
    Icd10Prefix("J", "Diseases of the respiratory system", 0.15),
    Icd10Prefix("K", "Diseases of the digestive system", 0.05),
    Icd10Prefix("M", "Diseases of the musculoskeletal system", 0.10),
    Icd10Prefix("R", "Symptoms, signs and abnormal clinical findings", 0.05),
)

PAYERS: Tuple[Payer, ...] = (
    Payer("Medicare", 0.55),
    Payer("Medicaid", 0.60),
    Payer("Blue Cross", 0.45),
    Payer("UnitedHealthcare", 0.50),
    Payer("Aetna", 0.40),
    Payer("Cigna", 0.57),
    Payer("Humana", 0.48),
    Payer("Anthem", 0.42),
)

SPECIALTIES: Tuple[Specialty, ...] = (
    Specialty("Family Medicine", 0.40),
    Specialty("Internal Medicine", 0.45),
    Specialty("Cardiology", 0.55),
    Specialty("Orthopedics", 0.50),
    Specialty("Neurology", 0.56),
    Specialty("Oncology", 0.52),
    Specialty("Radiology", 0.48),
    Specialty("Pathology", 0.42),
    Specialty("Emergency Medicine", 0.58),
    Specialty("Surgery", 0.60),
)


# ---------------- Keyed lookup ---------------- #

@dataclass(frozen=True)
class ReferenceCatalogs:
    """The five catalogs of one run, indexed for keyed lookup.

    Every lookup either returns the entry or raises LookupFailure.
    """

    payer_rules: Tuple[PayerRule, ...] = PAYER_RULES
    cpt_ranges: Tuple[CptRange, ...] = CPT_CODE_RANGES
    icd10_prefixes: Tuple[Icd10Prefix, ...] = ICD10_PREFIXES
    payers: Tuple[Payer, ...] = PAYERS
    specialties: Tuple[Specialty, ...] = SPECIALTIES

    _rules_by_id: Dict[int, PayerRule] = field(init=False, repr=False, compare=False)
    _icd_by_prefix: Dict[str, Icd10Prefix] = field(init=False, repr=False, compare=False)
    _payers_by_name: Dict[str, Payer] = field(init=False, repr=False, compare=False)
    _specialties_by_name: Dict[str, Specialty] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # normalise lists to tuples so the dataclass stays hashable/immutable
        for name in ("payer_rules", "cpt_ranges", "icd10_prefixes", "payers", "specialties"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

        object.__setattr__(self, "_rules_by_id", {r.id: r for r in self.payer_rules})
        object.__setattr__(self, "_icd_by_prefix", {p.prefix: p for p in self.icd10_prefixes})
        object.__setattr__(self, "_payers_by_name", {p.name: p for p in self.payers})
        object.__setattr__(self, "_specialties_by_name", {s.name: s for s in self.specialties})

    def named_catalogs(self) -> Dict[str, tuple]:
        return {
            "payer_rules": self.payer_rules,
            "cpt_ranges": self.cpt_ranges,
            "icd10_prefixes": self.icd10_prefixes,
            "payers": self.payers,
            "specialties": self.specialties,
        }

    def rule(self, rule_id: int) -> PayerRule:
        try:
            return self._rules_by_id[rule_id]
        except KeyError:
            raise LookupFailure("payer rule", rule_id) from None

    def payer(self, name: str) -> Payer:
        try:
            return self._payers_by_name[name]
        except KeyError:
            raise LookupFailure("payer", name) from None

    def specialty(self, name: str) -> Specialty:
        try:
            return self._specialties_by_name[name]
        except KeyError:
            raise LookupFailure("specialty", name) from None

    def icd10_prefix(self, code: str) -> Icd10Prefix:
        """Entry for the first letter of an ICD-10 code."""
        prefix = code[:1]
        try:
            return self._icd_by_prefix[prefix]
        except KeyError:
            raise LookupFailure("ICD-10 prefix", prefix) from None

    def cpt_range(self, code: int) -> CptRange:
        # ranges may overlap in custom catalogs: first match wins
        for cpt in self.cpt_ranges:
            if cpt.contains(code):
                return cpt
        raise LookupFailure("CPT range", code)
