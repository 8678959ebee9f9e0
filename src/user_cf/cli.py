"""Command-line entry point: recommend for one user, then score the recommender.

    user-cf --user-id 2 --top-n 3 --trials 10
"""
from __future__ import annotations

import argparse
import logging
from functools import partial
from pathlib import Path

from .config import load_config
from .data import load_ratings
from .errors import UserCFError
from .evaluation import AverageAbsoluteDifferenceEvaluator
from .recommender import build_recommender, recommendations_frame
from .utils import ReproducibilityConfig, set_global_seed, setup_logging


logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="User-based collaborative filtering (Pearson similarity)")
    p.add_argument("--config", type=Path, default=None, help="Path to config YAML (default: <repo>/config.yaml)")
    p.add_argument("--dataset", type=Path, default=None, help="userID,itemID,value ratings file")
    p.add_argument("--user-id", type=int, default=None, help="User to recommend for")
    p.add_argument("--top-n", type=int, default=None, help="How many items to recommend")
    p.add_argument("--threshold", type=float, default=None, help="Minimum similarity for a neighbor")
    p.add_argument("--trials", type=int, default=None, help="How many evaluation runs to score")
    p.add_argument("--seed", type=int, default=None, help="Seed for the evaluation splits")
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    setup_logging("INFO")

    try:
        cfg = load_config(args.config).with_overrides(
            dataset_path=args.dataset,
            user_id=args.user_id,
            top_n=args.top_n,
            threshold=args.threshold,
            trials=args.trials,
            seed=args.seed,
        )
        setup_logging(cfg.log_level)
        if cfg.seed is not None:
            set_global_seed(ReproducibilityConfig(seed=cfg.seed))

        store = load_ratings(cfg.dataset_path)
        builder = partial(build_recommender, threshold=cfg.threshold, weighted=cfg.weighted)
        recs = builder(store).recommend(cfg.user_id, cfg.top_n)
    except (UserCFError, FileNotFoundError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    print(f"\n=== Recommendations for user #{cfg.user_id} ===")
    if recs:
        print(recommendations_frame(recs).to_string(index=False))
    else:
        print("No recommendations found (try lowering --threshold).")

    # The split is random, so scores differ between runs unless --seed is given.
    evaluator = AverageAbsoluteDifferenceEvaluator(builder, seed=cfg.seed)
    print("\n=== Evaluation (mean absolute error, 0 = perfect) ===")
    results = evaluator.run_trials(store, cfg.trials, cfg.train_fraction, cfg.test_fraction)
    for i, result in enumerate(results):
        print(f"Score {i}: {result}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
