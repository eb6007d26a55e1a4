#!/usr/bin/env python
"""Run range and nearest-neighbour queries over a point table using a YAML config.

Usage:
    python scripts/run_queries.py --config configs/query_run.template.yaml
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys


# Ensure local package import works when the script is executed directly.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from kdtree_st.query_run import run_queries_from_config


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run reproducible 2d-tree query pipeline")
    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to YAML config file (configs/*.yaml)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG level instead of INFO",
    )
    return parser


def main() -> None:
    args = _build_arg_parser().parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    run_dir = run_queries_from_config(config_path=args.config)

    summary_path = run_dir / "summary.json"
    with summary_path.open("r", encoding="utf-8") as handle:
        summary = json.load(handle)

    print(f"Query run complete: {run_dir}")
    print(
        "Summary:",
        {
            "n_points": summary["n_points"],
            "n_range_queries": summary["n_range_queries"],
            "n_nearest_queries": summary["n_nearest_queries"],
            "range_mismatches": summary["range_mismatches"],
            "nearest_mismatches": summary["nearest_mismatches"],
        },
    )


if __name__ == "__main__":
    main()
