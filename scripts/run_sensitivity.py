"""Run the standard one-factor sensitivity sweeps and export one table per parameter."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from growthsim.analysis import run_sensitivity_suite, sensitivity_frame
from growthsim.cli_params import args_to_params, build_parser
from growthsim.errors import ModelError
from growthsim.params import default_sensitivity_ranges


def main(argv: list[str] | None = None) -> None:
    parser = build_parser("Sweep key business parameters one at a time over 12-month projections.")
    parser.add_argument(
        "--output-dir",
        type=str,
        default="outputs/sensitivity",
        help="Directory where sweep tables will be saved (default: outputs/sensitivity).",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    params = args_to_params(args)
    try:
        sweeps = run_sensitivity_suite(
            params["business"], params["infra"], params["stages"], default_sensitivity_ranges())
    except ModelError as err:
        print(f"[error] {err}", file=sys.stderr)
        raise SystemExit(2)

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    for name, points in sweeps.items():
        sensitivity_frame(points).to_csv(output_dir / f"{name}.csv", index=False)

    print(f"Saved sensitivity tables to {output_dir.resolve()}")


if __name__ == "__main__":
    main()
