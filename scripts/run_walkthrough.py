#!/usr/bin/env python3
"""
K-means walkthrough: load a table, score k with the elbow and silhouette
methods, and (once k is chosen) partition and report.

Run without --k first, look at elbow.png / silhouette.png, then rerun with
the k you picked.

Usage:
    python scripts/run_walkthrough.py --data regions.csv --output-dir out
    python scripts/run_walkthrough.py --data regions.csv --k 4 --output-dir out

Or set environment variables (see kmeans_study.config):
    KMEANS_RESTARTS=50 python scripts/run_walkthrough.py --data regions.csv
"""

import argparse
import sys
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from kmeans_study.algorithms import AdviseConfig
from kmeans_study.config import config
from kmeans_study.utils.logging_config import get_logger, setup_logging
from kmeans_study.walkthrough import run_walkthrough

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    defaults = config.clustering
    p = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    p.add_argument("--data", required=True, help="CSV file, one row per observation")
    p.add_argument("--label-column", default=None,
                   help="Column with observation names (default: first column)")
    p.add_argument("--k", type=int, default=None,
                   help="Final number of clusters; omit to only score k")
    p.add_argument("--k-min", type=int, default=defaults.k_min)
    p.add_argument("--k-max", type=int, default=defaults.k_max)
    p.add_argument("--restarts", type=int, default=defaults.restarts)
    p.add_argument("--max-iter", type=int, default=defaults.max_iterations)
    p.add_argument("--seed", type=int, default=defaults.seed)
    p.add_argument("--workers", type=int, default=defaults.n_workers)
    p.add_argument("--output-dir", default=None, help="Where to write tables and figures")
    p.add_argument("--log-level", default=defaults.log_level)
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    cfg = AdviseConfig(
        k_min=args.k_min,
        k_max=args.k_max,
        restarts=args.restarts,
        max_iterations=args.max_iter,
        rng_seed=args.seed,
        n_workers=args.workers,
    )
    try:
        result = run_walkthrough(
            args.data,
            label_column=args.label_column,
            k=args.k,
            output_dir=args.output_dir,
            cfg=cfg,
        )
    except (FileNotFoundError, ValueError) as e:
        logger.error("%s", e)
        return 1

    print(result.score_table().to_string(index=False))
    if result.final is not None:
        print()
        print(result.profile.to_string())
    return 0


if __name__ == "__main__":
    sys.exit(main())
