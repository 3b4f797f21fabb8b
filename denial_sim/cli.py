"""
Command-line entry point for the claim-denial simulation.

Usage (from project root):

    python -m denial_sim.cli [--seed 44] [--claims 6685] [--out data/raw]

This script:
1) Generates a deterministic synthetic claims population
2) Prints the validation summary (status mix, trends, model metrics, impact)
3) Writes the claims CSV, the JSON report and a dataset manifest
"""

from __future__ import annotations

import argparse
import dataclasses
import datetime
import hashlib
import logging
import platform
from pathlib import Path
from typing import List, Optional

from .config import SimulationConfig
from .errors import DenialSimError, is_undefined
from .pipeline import SimulationRun, report_to_json, simulate


# -------------------------------------------------------------------
# Output location
# -------------------------------------------------------------------

DATA_DIR = Path.cwd() / "data" / "raw"


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------

def file_hash(path: Path) -> str:
    """Compute SHA-256 hash of a file (streaming-safe)."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def fmt_pct(value: float) -> str:
    return "N/A" if is_undefined(value) else f"{value:.1f}%"


def fmt_money(value: float) -> str:
    return f"${value:,.2f}"


def _parse_date(text: str) -> datetime.date:
    try:
        return datetime.date.fromisoformat(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {text!r}") from None


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="denial-sim",
        description="Generate and validate a synthetic claim-denial dataset.",
    )
    p.add_argument("--seed", type=int, default=None, help="random seed")
    p.add_argument("--claims", type=int, default=None, help="number of claims")
    p.add_argument("--start", type=_parse_date, default=None, help="first submission date")
    p.add_argument("--end", type=_parse_date, default=None, help="last submission date")
    p.add_argument("--no-response-rate", type=float, default=None)
    p.add_argument("--out", type=Path, default=DATA_DIR, help="output directory")
    p.add_argument("--no-write", action="store_true", help="print the summary only")
    p.add_argument("-v", "--verbose", action="store_true")
    return p


def config_from_args(args: argparse.Namespace) -> SimulationConfig:
    overrides = {
        "seed": args.seed,
        "total_claims": args.claims,
        "start_date": args.start,
        "end_date": args.end,
        "target_no_response_rate": args.no_response_rate,
    }
    return dataclasses.replace(
        SimulationConfig(), **{k: v for k, v in overrides.items() if v is not None}
    )


# -------------------------------------------------------------------
# Console summary
# -------------------------------------------------------------------

def print_summary(report: dict) -> None:
    summary = report["datasetSummary"]
    conclusion = report["conclusionValidation"]
    breakdown, pct = summary["statusBreakdown"], summary["percentages"]

    print("Healthcare Claims Dataset Analysis")
    print("=================================")
    print(f"Total Claims: {summary['totalClaims']}")
    print(f"Date Range: {summary['dateRange']}")
    print("\nStatus Breakdown:")
    print(f"- Paid: {breakdown['paid']} ({fmt_pct(pct['paid'])})")
    print(f"- Denied: {breakdown['denied']} ({fmt_pct(pct['denied'])})")
    print(f"- No Response: {breakdown['noResponse']} ({fmt_pct(pct['noResponse'])})")

    band = conclusion["denialRateRange"]
    print(f"\nDenial Rate Range (Monthly): {fmt_pct(band['min'])} - {fmt_pct(band['max'])}")
    print(f"No Response Claims Rate: {fmt_pct(conclusion['noResponseRate'])}")

    print("\nTop Denial Factors:")
    for factor in conclusion["topDenialFactors"]:
        print(f"- {factor}")

    metrics = conclusion["modelPerformance"]
    print("\nModel Performance Metrics:")
    print(f"- Accuracy: {fmt_pct(metrics['accuracy'])}")
    print(f"- Precision: {fmt_pct(metrics['precision'])}")
    print(f"- Recall: {fmt_pct(metrics['recall'])}")
    print(f"- F1 Score: {fmt_pct(metrics['f1Score'])}")

    high = conclusion["highRiskIdentification"]
    print("\nHigh Risk Claims Identification:")
    print(f"- {high['count']} claims identified as high risk (>{high['threshold']:.0%} probability)")
    print(f"- {high['deniedCount']} of these were actually denied")
    print(f"- Prediction accuracy for high risk claims: {fmt_pct(high['accuracy'])}")

    automation = report["automationAnalysis"]
    print("\nAutomation Workflow Performance:")
    for wf in automation["workflowPerformance"]:
        print(
            f"- {wf['name']}: {wf['claimsProcessed']} claims processed, "
            f"{fmt_pct(wf['successRate'])} success rate, "
            f"{fmt_pct(wf['timeReduction'])} time reduction"
        )

    impact = automation["financialImpact"]
    print("\nFinancial Impact of Automation:")
    print(f"- Labor Cost Savings: {fmt_money(impact['totalLaborSaved'])}")
    print(f"- Revenue Protected: {fmt_money(impact['totalRevenueSaved'])}")
    print(f"- Total Financial Impact: {fmt_money(impact['totalImpact'])}")


# -------------------------------------------------------------------
# Outputs
# -------------------------------------------------------------------

def write_outputs(run: SimulationRun, out_dir: Path) -> Path:
    """Write claims.csv, report.json and a manifest locking both."""
    out_dir.mkdir(parents=True, exist_ok=True)

    paths = {
        "claims.csv": out_dir / "claims.csv",
        "report.json": out_dir / "report.json",
    }

    claims = run.frame.copy()
    claims["payer_rules_violated"] = claims["payer_rules_violated"].map(
        lambda rules: ";".join(str(r) for r in rules)
    )
    claims.to_csv(paths["claims.csv"], index=False)
    paths["report.json"].write_text(report_to_json(run.report), encoding="utf-8")

    manifest = {
        "dataset_version": "v1.0",
        "generated_at_utc": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "generator_entrypoint": "denial_sim.cli",
        "generator_function": "simulate",
        "python_version": platform.python_version(),
        "platform": platform.platform(),
        "seed": run.config.seed,
        "row_counts": {"claims": len(run.frame)},
        "file_hashes_sha256": {
            name: file_hash(path) for name, path in paths.items()
        },
    }

    manifest_path = out_dir / "dataset_manifest.json"
    manifest_path.write_text(report_to_json(manifest), encoding="utf-8")
    return manifest_path


# -------------------------------------------------------------------
# Main entrypoint
# -------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    print("▶ Generating synthetic claims dataset...")
    try:
        run = simulate(config_from_args(args))
    except DenialSimError as exc:
        print(f"✘ {exc}")
        return 2

    print_summary(run.report)

    if not args.no_write:
        manifest_path = write_outputs(run, args.out)
        print(f"\n✔ Data written to {args.out}")
        print(f"✔ Manifest path: {manifest_path}")

    print("✅ Dataset generation complete")
    return 0


# -------------------------------------------------------------------
# CLI hook
# -------------------------------------------------------------------

if __name__ == "__main__":
    raise SystemExit(main())
