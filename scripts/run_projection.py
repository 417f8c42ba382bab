"""Run a single deterministic growth projection and export its tables."""

from __future__ import annotations

import logging
import sys
from dataclasses import asdict
from pathlib import Path

import pandas as pd

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from growthsim.analysis import calculate_investment_returns, compare_benchmarks
from growthsim.cli_params import args_to_params, build_parser
from growthsim.errors import ModelError
from growthsim.params import default_benchmarks, default_investment_terms
from growthsim.payroll import default_employee_params, operating_schedule
from growthsim.sim import projection_frame, run_projection, summarize_projection


def main(argv: list[str] | None = None) -> None:
    parser = build_parser("Run a month-by-month growth projection and save its tables.")
    parser.add_argument(
        "--output-dir",
        type=str,
        default="outputs/projection",
        help="Directory where CSV outputs will be saved (default: outputs/projection).",
    )
    parser.add_argument(
        "--with-team-costs",
        action="store_true",
        help="Also export operating income after the default team cost schedule.",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    params = args_to_params(args)
    try:
        projection = run_projection(**params)
    except ModelError as err:
        print(f"[error] {err}", file=sys.stderr)
        raise SystemExit(2)

    terms = default_investment_terms()
    returns = calculate_investment_returns(
        terms.investment_amount, terms.premoney_valuation, projection, terms.exit_multiples)

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    projection_frame(projection).to_csv(output_dir / "cohorts.csv", index=True)
    summarize_projection(projection, params["business"]).to_csv(output_dir / "kpis.csv", index=False)
    pd.DataFrame([asdict(r) for r in compare_benchmarks(projection, default_benchmarks())]).to_csv(
        output_dir / "benchmarks.csv", index=False)
    pd.DataFrame([asdict(r) for r in returns]).to_csv(output_dir / "investment_returns.csv", index=False)

    if args.with_team_costs:
        operating_schedule(projection, default_employee_params()).to_csv(
            output_dir / "operating_income.csv", index=True)

    print(f"Saved results to {output_dir.resolve()}")


if __name__ == "__main__":
    main()
